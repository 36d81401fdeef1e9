"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access token signing/verification via PyJWT
- Refresh token value generation and TTL parsing
"""
from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from utils.exceptions import InvalidTokenError, TokenExpiredError

ph = PasswordHasher()

DEFAULT_EXPIRES_IN_SECONDS = 3600

_EXPIRES_IN_RE = re.compile(r"^(\d+)([dhms])$")
_UNIT_SECONDS = {"d": 86400, "h": 3600, "m": 60, "s": 1}


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def password_needs_rehash(password_hash: str) -> bool:
    """True when the digest was produced with weaker parameters than `ph` uses now."""
    try:
        return ph.check_needs_rehash(password_hash)
    except InvalidHashError:
        return False


def generate_refresh_token() -> str:
    """Opaque refresh token value."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC now; every stored timestamp in this app is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_expires_in(expires_in: str) -> int:
    """
    Convert a TTL string such as "15m", "1h" or "7d" into seconds.
    Anything that does not match <digits><d|h|m|s> falls back to 3600.
    """
    match = _EXPIRES_IN_RE.match(str(expires_in or "").strip())
    if not match:
        return DEFAULT_EXPIRES_IN_SECONDS
    return int(match.group(1)) * _UNIT_SECONDS[match.group(2)]


class AccessTokenCodec:
    """
    Signs and verifies short-lived bearer tokens.

    The secret is passed in explicitly so each app (and each test) can run
    with its own key.
    """

    token_type = "access"

    def __init__(self, secret: str, algorithm: str = "HS256", issuer: str = "prompt-studio-api"):
        if not secret:
            raise ValueError("AccessTokenCodec requires a non-empty secret")
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer

    def issue(self, claims: Mapping[str, Any], ttl_seconds: int) -> str:
        now = utcnow()
        exp = now + timedelta(seconds=ttl_seconds)
        payload = {
            "iss": self.issuer,
            "sub": str(claims["user_id"]),
            "email": claims.get("email"),
            "role": claims.get("role"),
            "type": self.token_type,
            "iat": int(now.replace(tzinfo=timezone.utc).timestamp()),
            "exp": int(exp.replace(tzinfo=timezone.utc).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a token.
        Raises TokenExpiredError when only the expiry is wrong, InvalidTokenError otherwise.
        """
        try:
            decoded = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError()
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Invalid authentication token: {exc}")

        if decoded.get("type") != self.token_type:
            raise InvalidTokenError("Wrong token type")
        return {
            "user_id": decoded["sub"],
            "email": decoded.get("email"),
            "role": decoded.get("role"),
        }
