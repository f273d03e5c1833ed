"""Security helpers (hashing and verification)."""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass

import bcrypt
from argon2 import PasswordHasher, exceptions as argon_exc

from .config import Settings

_ph = PasswordHasher()
_ARGON2_PREFIX = "argon2$"
_BCRYPT_SHA256_PREFIX = "bcrypt-sha256$"
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
# bcrypt only reads the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72

SCHEMES = ("bcrypt", "argon2")


def _bcrypt_sha256_input(password: str) -> bytes:
    """Fixed 44-byte input, so every character of the password counts."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def _legacy_bcrypt_input(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def _bcrypt_cost(digest: str) -> int | None:
    try:
        return int(digest.split("$")[2])
    except (IndexError, ValueError):
        return None


def _bcrypt_check(secret: bytes, digest: str) -> bool:
    try:
        return bcrypt.checkpw(secret, digest.encode("utf-8"))
    except ValueError:
        return False


@dataclass(frozen=True)
class CredentialHasher:
    """Produces and checks salted password digests for one configured scheme.

    New bcrypt digests hash a SHA-256 of the password and carry a
    ``bcrypt-sha256$`` prefix. Bare ``$2a$``/``$2b$``/``$2y$`` digests, as
    written by other bcrypt implementations, still verify (first 72 bytes
    only) and are reported by ``needs_rehash``.
    """

    scheme: str = "bcrypt"
    work_factor: int = 10

    def __post_init__(self) -> None:
        if self.scheme not in SCHEMES:
            raise ValueError(f"Unsupported password scheme: {self.scheme!r}")
        if self.scheme == "bcrypt" and not 4 <= self.work_factor <= 31:
            raise ValueError("bcrypt work factor must be between 4 and 31")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialHasher":
        return cls(scheme=settings.password_scheme, work_factor=settings.password_work_factor)

    def hash(self, password: str) -> str:
        if self.scheme == "argon2":
            return f"{_ARGON2_PREFIX}{_ph.hash(password)}"
        salt = bcrypt.gensalt(rounds=self.work_factor)
        hashed = bcrypt.hashpw(_bcrypt_sha256_input(password), salt).decode("utf-8")
        return f"{_BCRYPT_SHA256_PREFIX}{hashed}"

    def verify(self, password: str | None, stored_hash: str | None) -> bool:
        """Return True when password matches the digest; absent values never match."""
        if not isinstance(password, str) or not stored_hash:
            return False
        if stored_hash.startswith(_ARGON2_PREFIX):
            hashed = stored_hash[len(_ARGON2_PREFIX) :]
            try:
                return _ph.verify(hashed, password)
            except (argon_exc.VerificationError, argon_exc.InvalidHashError):
                return False
        if stored_hash.startswith(_BCRYPT_SHA256_PREFIX):
            return _bcrypt_check(_bcrypt_sha256_input(password), stored_hash[len(_BCRYPT_SHA256_PREFIX) :])
        if stored_hash.startswith(_BCRYPT_PREFIXES):
            return _bcrypt_check(_legacy_bcrypt_input(password), stored_hash)
        return False

    def needs_rehash(self, stored_hash: str | None) -> bool:
        """True when the digest was not produced with the current scheme and work factor."""
        stored = stored_hash or ""
        if stored.startswith(_ARGON2_PREFIX):
            if self.scheme != "argon2":
                return True
            try:
                return _ph.check_needs_rehash(stored[len(_ARGON2_PREFIX) :])
            except argon_exc.InvalidHashError:
                return True
        if stored.startswith(_BCRYPT_SHA256_PREFIX):
            hashed = stored[len(_BCRYPT_SHA256_PREFIX) :]
            return self.scheme != "bcrypt" or _bcrypt_cost(hashed) != self.work_factor
        return True
