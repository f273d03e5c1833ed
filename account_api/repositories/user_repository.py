"""Data access for user records backed by SQLAlchemy."""
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from account_api.db.models import User
from account_api.db.session import Database
from account_api.domain.errors import UniquenessError

UNIQUE_FIELDS = (("email", User.email), ("username", User.username))


class UserRepository:
    """CRUD helpers over the users table.

    Values handed to ``add``/``update`` must already be prepared for writing
    (validated, password hashed); the repository only persists them.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def _conflicting_field(self, session, values: dict[str, Any], exclude_id: str | None = None) -> Optional[str]:
        for name, column in UNIQUE_FIELDS:
            if name not in values:
                continue
            stmt = select(User.id).where(column == values[name])
            if exclude_id:
                stmt = stmt.where(User.id != exclude_id)
            if session.execute(stmt.limit(1)).first() is not None:
                return name
        return None

    def add(self, values: dict[str, Any]) -> User:
        with self.database.session() as session:
            user = User(**values)
            session.add(user)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                field = self._conflicting_field(session, values)
                if field is None:
                    raise
                raise UniquenessError(field) from exc
            session.refresh(user)
            return user

    def get(self, user_id: str) -> Optional[User]:
        with self.database.session() as session:
            return session.get(User, user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        with self.database.session() as session:
            stmt = select(User).where(User.username == username)
            return session.execute(stmt).scalar_one_or_none()

    def list_users(self) -> list[User]:
        with self.database.session() as session:
            stmt = select(User).order_by(User.created_at, User.id)
            return list(session.execute(stmt).scalars().all())

    def update(self, user_id: str, values: dict[str, Any]) -> Optional[User]:
        with self.database.session() as session:
            user = session.get(User, user_id)
            if not user:
                return None
            for column, value in values.items():
                setattr(user, column, value)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                field = self._conflicting_field(session, values, exclude_id=user_id)
                if field is None:
                    raise
                raise UniquenessError(field) from exc
            session.refresh(user)
            return user

    def delete(self, user_id: str) -> bool:
        with self.database.session() as session:
            result = session.execute(delete(User).where(User.id == user_id))
            session.commit()
            return bool(result.rowcount)
