"""SQLAlchemy models for the account store."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text

from account_api.domain.users import PERMISSION_LEVELS
from .session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class BaseRecord(Base):
    """Common fields shared by every persisted record: identifier and timestamps."""

    __abstract__ = True

    id = Column(String(36), primary_key=True, default=_new_id)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class User(BaseRecord):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "permission_level IN ({})".format(", ".join(str(level) for level in PERMISSION_LEVELS)),
            name="ck_users_permission_level",
        ),
    )

    first_name = Column(String(256), nullable=False)
    last_name = Column(String(256), nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    username = Column(String(256), unique=True, index=True, nullable=False)
    password = Column(Text, nullable=False)
    permission_level = Column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<User id={self.id!r} username={self.username!r}>"
