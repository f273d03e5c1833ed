"""
Account use cases: user record lifecycle and credential authentication.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from account_api.core.security import CredentialHasher
from account_api.db.models import User
from account_api.domain.errors import InvalidCredentialsError, UserNotFoundError
from account_api.domain.users import prepare_user_for_write
from account_api.repositories.user_repository import UserRepository


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


@dataclass
class AccountService:
    """Handles registration, authentication and CRUD over user records."""

    repository: UserRepository
    hasher: CredentialHasher

    # -------------------------------------- records --------------------------------------
    def register(self, data: Mapping[str, Any]) -> User:
        values = prepare_user_for_write(data, self.hasher)
        return self.repository.add(values)

    def get_user(self, user_id: str) -> User:
        user = self.repository.get(user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return user

    def list_users(self) -> list[User]:
        return self.repository.list_users()

    def update_user(self, user_id: str, data: Mapping[str, Any]) -> User:
        """Replace every field of a record; omitted permission level falls back to the default."""
        return self._write(user_id, data, partial=False)

    def patch_user(self, user_id: str, data: Mapping[str, Any]) -> User:
        return self._write(user_id, data, partial=True)

    def _write(self, user_id: str, data: Mapping[str, Any], *, partial: bool) -> User:
        self.get_user(user_id)
        values = prepare_user_for_write(data, self.hasher, partial=partial)
        if not values:
            return self.get_user(user_id)
        user = self.repository.update(user_id, values)
        if not user:
            raise UserNotFoundError(user_id)
        return user

    def delete_user(self, user_id: str) -> None:
        if not self.repository.delete(user_id):
            raise UserNotFoundError(user_id)

    # -------------------------------------- authentication --------------------------------------
    def authenticate(self, username: Any, password: Any) -> User:
        """Return the user whose username and password match.

        Absent or blank credentials, an unknown username and a wrong password
        all raise the same InvalidCredentialsError.
        """
        if _blank(username) or _blank(password):
            raise InvalidCredentialsError()
        user = self.repository.get_by_username(username)
        if not user or not self.hasher.verify(password, user.password):
            raise InvalidCredentialsError()
        if self.hasher.needs_rehash(user.password):
            user = self.repository.update(user.id, {"password": self.hasher.hash(password)}) or user
        return user
