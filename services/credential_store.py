"""Lookups and writes for User rows, keyed by normalized email or id."""
from __future__ import annotations

from typing import Optional

from models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower() if isinstance(email, str) else email


class CredentialStore:
    def __init__(self, storage):
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.query(User).filter(User.email == normalize_email(email)).first()

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.storage.get(User, user_id)

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def add(self, user: User) -> User:
        user.email = normalize_email(user.email)
        self.storage.new(user)
        return user
