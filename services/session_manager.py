"""
Session manager: turns credentials into tokens and owns every trust transition.

- register / login issue an access token (JWT) plus an opaque refresh token
- refresh rotates: the presented refresh token is revoked and a new pair issued
- presenting a refresh token that exists but is revoked or expired is treated
  as possible theft: every refresh token of that user is revoked
- logout revokes one refresh token, logout_all revokes all of them
- change_password re-hashes and revokes all refresh tokens in one commit
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError

from models.user import User, ROLE_USER
from services.credential_store import CredentialStore, normalize_email
from services.token_ledger import RefreshTokenLedger, REFRESH_TOKEN_TTL
from utils.exceptions import ConflictError, NotFoundError, UnauthorizedError
from utils.security import (
    AccessTokenCodec,
    parse_expires_in,
    password_needs_rehash,
    utcnow,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
ACCOUNT_DEACTIVATED = "Account is deactivated"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int

    def to_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": "bearer",
            "expires_in": self.expires_in,
        }


@dataclass(frozen=True)
class AuthResult:
    user: User
    tokens: TokenPair


class SessionManager:
    def __init__(
        self,
        storage,
        codec: AccessTokenCodec,
        access_token_ttl: str = "1h",
        refresh_token_ttl: timedelta = REFRESH_TOKEN_TTL,
    ):
        self.storage = storage
        self.codec = codec
        self.access_token_ttl = access_token_ttl
        self.credentials = CredentialStore(storage)
        self.ledger = RefreshTokenLedger(storage, ttl=refresh_token_ttl)

    @classmethod
    def from_config(cls, config: Mapping[str, Any], storage) -> "SessionManager":
        codec = AccessTokenCodec(
            secret=config["JWT_SECRET"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "prompt-studio-api"),
        )
        return cls(
            storage,
            codec,
            access_token_ttl=config.get("JWT_EXPIRES_IN", "1h"),
            refresh_token_ttl=timedelta(days=int(config.get("REFRESH_TOKEN_TTL_DAYS", 30))),
        )

    def register(self, email: str, password: str, first_name: str, last_name: str) -> AuthResult:
        email = normalize_email(email)
        if self.credentials.email_exists(email):
            raise ConflictError("User with this email already exists")

        user = User(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=ROLE_USER,
            is_active=True,
            is_email_verified=False,
        )
        self.credentials.add(user)
        tokens = self._issue_tokens(user)
        try:
            self.storage.save()
        except IntegrityError:
            # lost a race against a concurrent registration of the same email
            raise ConflictError("User with this email already exists")

        logger.info("New user registered: %s", user.email)
        return AuthResult(user=user, tokens=tokens)

    def login(
        self,
        email: str,
        password: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> AuthResult:
        user = self.credentials.get_by_email(email)
        if user is None:
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not user.is_active:
            raise UnauthorizedError(ACCOUNT_DEACTIVATED)
        if not verify_password(password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if password_needs_rehash(user.password_hash):
            user.password = password
        user.last_login_at = utcnow()
        self.storage.new(user)
        tokens = self._issue_tokens(user, user_agent, ip_address)
        self.storage.save()

        logger.info("User logged in: %s", user.email)
        return AuthResult(user=user, tokens=tokens)

    def refresh(
        self,
        refresh_token: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> TokenPair:
        stored = self.ledger.find(refresh_token)
        if stored is None:
            raise UnauthorizedError("Invalid refresh token")

        if not stored.is_valid:
            self._revoke_on_reuse(stored.user_id)

        user = stored.user
        if not user.is_active:
            raise UnauthorizedError(ACCOUNT_DEACTIVATED)

        # a concurrent refresh with the same token may have won the row
        if not self.ledger.claim(stored):
            self._revoke_on_reuse(stored.user_id)
        tokens = self._issue_tokens(user, user_agent, ip_address)
        self.storage.save()
        return tokens

    def _revoke_on_reuse(self, user_id: str):
        revoked = self.ledger.revoke_all(user_id)
        self.storage.save()
        logger.warning(
            "Refresh token reuse for user %s; revoked %d active token(s)",
            user_id,
            revoked,
        )
        raise UnauthorizedError("Refresh token is expired or revoked")

    def logout(self, refresh_token: str | None) -> None:
        stored = self.ledger.find(refresh_token)
        if stored is None or stored.is_revoked:
            return
        self.ledger.revoke(stored)
        self.storage.save()

    def logout_all(self, user_id: str) -> int:
        revoked = self.ledger.revoke_all(user_id)
        self.storage.save()
        logger.info("All sessions logged out for user: %s (%d revoked)", user_id, revoked)
        return revoked

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = self.credentials.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(current_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")

        user.password = new_password
        self.storage.new(user)
        # new hash and session revocation commit together
        revoked = self.ledger.revoke_all(user_id)
        self.storage.save()

        logger.info("Password changed for user: %s (%d session(s) revoked)", user.email, revoked)

    def cleanup_expired_tokens(self) -> int:
        deleted = self.ledger.sweep()
        self.storage.save()
        logger.info("Refresh token cleanup removed %d row(s)", deleted)
        return deleted

    def authenticate(self, access_token: str) -> User:
        """
        Resolve a bearer access token to an active user.
        InvalidTokenError / TokenExpiredError from the codec propagate unchanged.
        """
        claims = self.codec.verify(access_token)
        user = self.credentials.get_by_id(claims["user_id"])
        if user is None or not user.is_active:
            raise UnauthorizedError("User not found or inactive")
        return user

    def get_user(self, user_id: str) -> User:
        user = self.credentials.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _issue_tokens(
        self,
        user: User,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> TokenPair:
        expires_in = parse_expires_in(self.access_token_ttl)
        access_token = self.codec.issue(
            {"user_id": user.id, "email": user.email, "role": user.role},
            expires_in,
        )
        row = self.ledger.issue(user.id, user_agent=user_agent, ip_address=ip_address)
        return TokenPair(access_token=access_token, refresh_token=row.token, expires_in=expires_in)
