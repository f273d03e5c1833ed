from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import pytest

# Make the account_api package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from account_api.core.config import Settings  # noqa: E402
from account_api.core.security import CredentialHasher  # noqa: E402
from account_api.db.session import Database  # noqa: E402
from account_api.repositories.user_repository import UserRepository  # noqa: E402
from account_api.services.account_service import AccountService  # noqa: E402

# bcrypt's minimum cost keeps the suite fast
TEST_WORK_FACTOR = 4


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        app_env="test",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        public_base_url="http://localhost:8000",
        password_scheme="bcrypt",
        password_work_factor=TEST_WORK_FACTOR,
        log_level="WARNING",
        cors_origins=(),
        auth_rate_limit=100,
        auth_rate_window_seconds=300,
        trusted_proxies=(),
    )


@pytest.fixture()
def make_settings(settings):
    def _make(**overrides) -> Settings:
        return dataclasses.replace(settings, **overrides)

    return _make


@pytest.fixture()
def database(settings):
    """Temporary SQLite database, dropped and disposed on teardown."""
    db = Database(settings.database_url)
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture()
def repository(database) -> UserRepository:
    return UserRepository(database)


@pytest.fixture()
def hasher() -> CredentialHasher:
    return CredentialHasher(scheme="bcrypt", work_factor=TEST_WORK_FACTOR)


@pytest.fixture()
def service(repository, hasher) -> AccountService:
    return AccountService(repository=repository, hasher=hasher)


@pytest.fixture()
def ann() -> dict:
    return {
        "firstName": "Ann",
        "lastName": "Lee",
        "email": "ann@example.com",
        "username": "ann_lee1",
        "password": "correcthorsebattery",
        "permissionLevel": 15,
    }


@pytest.fixture()
def bob() -> dict:
    return {
        "firstName": "Bob",
        "lastName": "Stone",
        "email": "bob@example.com",
        "username": "bob-stone",
        "password": "tr0ub4dor&3x",
    }
