"""Exceptions raised by the account domain and propagated to the HTTP layer."""

from __future__ import annotations

from typing import Mapping


class AccountError(Exception):
    """Base class for account-related exceptions."""


class ValidationError(AccountError):
    """One or more fields of a user record violate their constraints."""

    def __init__(self, errors: Mapping[str, str], model: str = "User"):
        self.errors = dict(errors)
        self.field, self.message = next(iter(self.errors.items()))
        details = ", ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"{model} validation failed: {details}")


class UniquenessError(AccountError):
    """A unique field collides with an existing record."""

    def __init__(self, field: str | None):
        self.field = field
        self.message = f"The {field} is already in use." if field else "The record conflicts with an existing one."
        super().__init__(self.message)


class InvalidCredentialsError(AccountError):
    def __init__(self, message: str = "Invalid credentials"):
        self.message = message
        super().__init__(message)


class UserNotFoundError(AccountError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User '{user_id}' not found")
