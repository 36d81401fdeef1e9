#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the Prompt Studio API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps
- save() that uses the DBStorage singleton
- to_dict() that formats timestamps and removes SA internals

Timestamps are server-side defaults (func.now()); for SQLite that maps to
CURRENT_TIMESTAMP, which is UTC.
"""

from __future__ import annotations

from datetime import datetime
import uuid

# Importing 'models' gives access to the global 'storage' instance (DBStorage)
# defined in models/__init__.py
import models

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

TIME_FMT = "%Y-%m-%dT%H:%M:%S.%f"

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at, updated_at,
    a storage-backed save() and a to_dict() for debugging and logs.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    # load server-generated timestamps right after INSERT/UPDATE
    __mapper_args__ = {"eager_defaults": True}

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        created_at/updated_at are left to the DB unless passed explicitly.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] ({self.id}) {self.to_dict()}"

    def save(self):
        """Add the instance to the current session and commit."""
        models.storage.new(self)
        models.storage.save()

    def to_dict(self) -> dict:
        """
        Return a dictionary of column values:
        - Adds __class__
        - Formats created_at / updated_at to TIME_FMT
        - Drops SQLAlchemy internal state and anything listed in __sensitive__
        """
        hidden = set(getattr(self, "__sensitive__", ()))
        d = {
            k: v for k, v in self.__dict__.items()
            if k != "_sa_instance_state" and not k.startswith("_") and k not in hidden
        }
        if isinstance(d.get("created_at"), datetime):
            d["created_at"] = d["created_at"].strftime(TIME_FMT)
        if isinstance(d.get("updated_at"), datetime):
            d["updated_at"] = d["updated_at"].strftime(TIME_FMT)
        d["__class__"] = self.__class__.__name__
        return d
