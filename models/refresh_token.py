"""
RefreshToken model: the ledger of issued refresh tokens so they can be rotated and revoked.
Fields:
- token (unique opaque value handed to the client)
- user_id (String(36)) - FK to users.id, cascades on delete
- expires_at, is_revoked
- user_agent, ip_address (provenance only)
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base
from utils.security import utcnow, as_naive_utc


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"
    __table_args__ = (
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )

    token = Column(String(500), nullable=False, unique=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    is_revoked = Column(Boolean, default=False, nullable=False)
    user_agent = Column(String(255), nullable=True)
    ip_address = Column(String(45), nullable=True)

    user = relationship("User", back_populates="refresh_tokens")

    @property
    def is_expired(self) -> bool:
        return utcnow() > as_naive_utc(self.expires_at)

    @property
    def is_valid(self) -> bool:
        return not self.is_revoked and not self.is_expired

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} revoked={self.is_revoked}>"
