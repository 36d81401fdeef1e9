"""
Refresh-token ledger.

Every issued refresh token is a row; rotation, logout and password changes
flip is_revoked, and sweep() deletes rows that can never be valid again.
Methods stage changes on the current session; callers commit.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_

from models.refresh_token import RefreshToken
from utils.security import generate_refresh_token, utcnow

REFRESH_TOKEN_TTL = timedelta(days=30)


class RefreshTokenLedger:
    def __init__(self, storage, ttl: timedelta = REFRESH_TOKEN_TTL):
        self.storage = storage
        self.ttl = ttl

    @property
    def session(self):
        return self.storage.get_session()

    def issue(self, user_id: str, user_agent: str | None = None, ip_address: str | None = None) -> RefreshToken:
        row = RefreshToken(
            token=generate_refresh_token(),
            user_id=user_id,
            expires_at=utcnow() + self.ttl,
            is_revoked=False,
            user_agent=user_agent[:255] if user_agent else None,
            ip_address=ip_address[:45] if ip_address else None,
        )
        self.storage.new(row)
        return row

    def find(self, token: str) -> Optional[RefreshToken]:
        if not token:
            return None
        return self.session.query(RefreshToken).filter(RefreshToken.token == token).first()

    def revoke(self, row: RefreshToken) -> None:
        row.is_revoked = True
        self.storage.new(row)

    def claim(self, row: RefreshToken) -> bool:
        """
        Revoke `row` only if it is still live, as one conditional UPDATE.
        Returns False when another request revoked it first.
        """
        changed = (
            self.session.query(RefreshToken)
            .filter(RefreshToken.id == row.id, RefreshToken.is_revoked.is_(False))
            .update({RefreshToken.is_revoked: True}, synchronize_session="fetch")
        )
        return changed == 1

    def revoke_all(self, user_id: str) -> int:
        """Revoke every live token of a user; returns how many rows changed."""
        return (
            self.session.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.is_revoked.is_(False))
            .update({RefreshToken.is_revoked: True}, synchronize_session="fetch")
        )

    def sweep(self, now: datetime | None = None) -> int:
        """Delete rows that are expired or revoked; returns the count."""
        now = now or utcnow()
        return (
            self.session.query(RefreshToken)
            .filter(or_(RefreshToken.expires_at < now, RefreshToken.is_revoked.is_(True)))
            .delete(synchronize_session="fetch")
        )
