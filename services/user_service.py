"""Account lifecycle operations on top of the credential store."""
from __future__ import annotations

import logging

from models.user import User
from services.credential_store import CredentialStore
from services.token_ledger import RefreshTokenLedger
from utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

_UNSET = object()


class UserService:
    def __init__(self, storage):
        self.storage = storage
        self.credentials = CredentialStore(storage)
        self.ledger = RefreshTokenLedger(storage)

    def get(self, user_id: str) -> User:
        user = self.credentials.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, first_name=None, last_name=None, avatar_url=_UNSET) -> User:
        """None for a name means "leave as is"; avatar_url=None clears the avatar."""
        user = self.get(user_id)
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if avatar_url is not _UNSET:
            user.avatar_url = avatar_url or None
        self.storage.new(user)
        self.storage.save()
        logger.info("User profile updated: %s", user_id)
        return user

    def deactivate(self, user_id: str) -> User:
        user = self.get(user_id)
        user.is_active = False
        self.storage.new(user)
        revoked = self.ledger.revoke_all(user_id)
        self.storage.save()
        logger.info("User deactivated: %s (%d refresh token(s) revoked)", user_id, revoked)
        return user

    def activate(self, user_id: str) -> User:
        user = self.get(user_id)
        user.is_active = True
        self.storage.new(user)
        self.storage.save()
        logger.info("User activated: %s", user_id)
        return user

    def delete(self, user_id: str) -> None:
        user = self.get(user_id)
        self.storage.delete(user)
        self.storage.save()
        logger.info("User deleted: %s", user_id)
