"""Domain rules for user records: field validation, permission levels, serialization."""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol

from email_validator import EmailNotValidError, validate_email

from .errors import ValidationError

# Starts with a letter; the remaining 2-255 characters are letters, digits, "_" or "-".
USERNAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_-]{2,255}")
# ASCII digits only, bounded so int() never sees an oversized string.
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]{1,20}")

DEFAULT_PERMISSION_LEVEL = 1


class Permission(enum.IntFlag):
    READ = 1
    CREATE = 2
    UPDATE = 4
    DELETE = 8


# Fixed whitelist; 7, 11, 13 and 14 are not accepted.
PERMISSION_LEVELS = (
    1,  # read
    2,  # create
    3,  # read and create
    4,  # update
    5,  # read and update
    6,  # create and update
    8,  # delete
    9,  # read and delete
    10,  # create and delete
    12,  # update and delete
    15,  # read, create, update and delete
)


def is_valid_permission_level(value: Any) -> bool:
    return not isinstance(value, bool) and value in PERMISSION_LEVELS


def permission_names(level: int) -> list[str]:
    """Return the capability names encoded by a permission level, lowest bit first."""
    granted = Permission(level & 0b1111)
    return [flag.name.lower() for flag in Permission if flag in granted]


def is_valid_username(value: str | None) -> bool:
    if not value:
        return False
    return bool(USERNAME_PATTERN.fullmatch(value))


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


class _CastError(Exception):
    pass


@dataclass(frozen=True)
class TextField:
    name: str
    column: str
    required_message: str
    trim: bool = False
    lowercase: bool = False
    min_length: Optional[tuple[int, str]] = None
    max_length: Optional[tuple[int, str]] = None
    check: Optional[tuple[Callable[[str], bool], str]] = None

    def cast(self, value: Any) -> str:
        if isinstance(value, str):
            pass
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        else:
            raise _CastError(
                f'Cast to string failed for value "{value}" (type {type(value).__name__}) at path "{self.name}"'
            )
        if self.trim:
            value = value.strip()
        if self.lowercase:
            value = value.lower()
        return value

    def validate(self, value: str) -> Optional[str]:
        if value == "":
            return self.required_message
        if self.max_length and len(value) > self.max_length[0]:
            return self.max_length[1]
        if self.min_length and len(value) < self.min_length[0]:
            return self.min_length[1]
        if self.check and not self.check[0](value):
            return self.check[1]
        return None


USER_TEXT_FIELDS = (
    TextField(
        name="firstName",
        column="first_name",
        required_message="First name is required.",
        trim=True,
        max_length=(256, "The first name must be of maximum length 256 characters."),
        min_length=(1, "The first name must be of minimum length 1 characters."),
    ),
    TextField(
        name="lastName",
        column="last_name",
        required_message="Last name is required.",
        trim=True,
        max_length=(256, "The last name must be of maximum length 256 characters."),
        min_length=(1, "The last name must be of minimum length 1 characters."),
    ),
    TextField(
        name="email",
        column="email",
        required_message="Email address is required.",
        trim=True,
        lowercase=True,
        check=(is_valid_email, "Please provide a valid email address."),
    ),
    TextField(
        name="username",
        column="username",
        required_message="Username is required.",
        check=(is_valid_username, "Please provide a valid username."),
    ),
    TextField(
        name="password",
        column="password",
        required_message="Password is required.",
        min_length=(10, "The password must be of minimum length 10 characters."),
        max_length=(256, "The password must be of maximum length 256 characters."),
    ),
)

PERMISSION_FIELD = "permissionLevel"
PERMISSION_REQUIRED_MESSAGE = "Permission level is required."


def _cast_permission_level(value: Any) -> Optional[int | float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise _CastError(
            f'Cast to Number failed for value "{value}" (type bool) at path "{PERMISSION_FIELD}"'
        )
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return None
        if INTEGER_PATTERN.fullmatch(text):
            try:
                return int(text)
            except ValueError:
                pass
    raise _CastError(
        f'Cast to Number failed for value "{value}" (type {type(value).__name__}) at path "{PERMISSION_FIELD}"'
    )


def validate_user(data: Mapping[str, Any], *, partial: bool = False) -> dict[str, Any]:
    """Apply the user record rules to external (camelCase) input.

    Returns the cleaned values keyed by column name. Unknown keys are dropped.
    With ``partial`` only the supplied fields are checked and the
    permission level gets no default. Every failing field is reported in a
    single ValidationError.
    """
    values: dict[str, Any] = {}
    errors: dict[str, str] = {}

    for field in USER_TEXT_FIELDS:
        if field.name not in data:
            if not partial:
                errors[field.name] = field.required_message
            continue
        raw = data[field.name]
        if raw is None:
            errors[field.name] = field.required_message
            continue
        try:
            value = field.cast(raw)
        except _CastError as exc:
            errors[field.name] = str(exc)
            continue
        message = field.validate(value)
        if message:
            errors[field.name] = message
        else:
            values[field.column] = value

    if PERMISSION_FIELD in data:
        try:
            level = _cast_permission_level(data[PERMISSION_FIELD])
        except _CastError as exc:
            errors[PERMISSION_FIELD] = str(exc)
        else:
            if level is None:
                errors[PERMISSION_FIELD] = PERMISSION_REQUIRED_MESSAGE
            elif not is_valid_permission_level(level):
                errors[PERMISSION_FIELD] = f"`{level}` is not a valid enum value for path `{PERMISSION_FIELD}`."
            else:
                values["permission_level"] = level
    elif not partial:
        values["permission_level"] = DEFAULT_PERMISSION_LEVEL

    if errors:
        raise ValidationError(errors)
    return values


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...


def prepare_user_for_write(
    data: Mapping[str, Any], hasher: PasswordHasher, *, partial: bool = False
) -> dict[str, Any]:
    """Validate input and replace the plaintext password with its digest.

    Every insert and every update that carries a password goes through here,
    so the store only ever receives hashed passwords.
    """
    values = validate_user(data, partial=partial)
    if "password" in values:
        values["password"] = hasher.hash(values["password"])
    return values


def serialize_user(user: Any) -> dict[str, Any]:
    """External representation of a user record; the password digest is never included."""
    def _iso(value):
        return value.isoformat() if value is not None else None

    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "username": user.username,
        "permissionLevel": user.permission_level,
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }
