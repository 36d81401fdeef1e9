"""
User model: the credential store row.

Passwords go through a write-only `password` attribute. Assigning it marks
the value as pending plaintext; the before_insert/before_update listener at
the bottom of this module hashes it exactly once and clears the mark.
Assigning `password_hash` directly stores a digest as-is.
"""
from sqlalchemy import Column, String, Boolean, DateTime, event
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel
from utils.security import hash_password

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


class User(BaseModel, Base):
    __tablename__ = "users"
    __sensitive__ = ("password_hash",)

    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    avatar_url = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=ROLE_USER)
    is_active = Column(Boolean, nullable=False, default=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @password.setter
    def password(self, plaintext: str):
        self.password_hash = plaintext
        self._password_is_plaintext = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User {self.email}>"


@event.listens_for(User, "before_insert")
@event.listens_for(User, "before_update")
def _hash_pending_password(mapper, connection, target: User):
    if getattr(target, "_password_is_plaintext", False):
        target.password_hash = hash_password(target.password_hash)
        target._password_is_plaintext = False
