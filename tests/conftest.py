"""Shared test fixtures and configuration.

Every test gets its own SQLite file under ``tmp_path`` with all
migrations applied, plus three users: ``alice`` and ``bob`` (regular
users) and ``admin1`` (administrator).
"""

import os

# Patch env vars BEFORE any napchart_api imports
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import datetime

import pytest

from napchart_api.app.core.config import settings
from napchart_api.app.core.db import init_db
from napchart_api.app.core.security import Principal, Role, create_access_token
from napchart_api.app.repositories.user_repository import UserRepository
from napchart_api.app.schemas.nap import NapWrite
from napchart_api.app.schemas.user import UserCreate


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point the app at a fresh, migrated database file."""
    db_path = str(tmp_path / "napchart-test.db")
    monkeypatch.setattr(settings, "database_url", db_path)
    init_db()
    return db_path


@pytest.fixture
def users(database):
    """Register alice, bob and admin1 and return them keyed by login."""
    repo = UserRepository()
    return {
        "alice": repo.create(UserCreate(login="alice", email="alice@example.com")),
        "bob": repo.create(UserCreate(login="bob", email="bob@example.com")),
        "admin1": repo.create(UserCreate(login="admin1", authorities=[Role.ADMIN, Role.USER])),
    }


@pytest.fixture
def alice():
    return Principal(login="alice", roles=frozenset({Role.USER}))


@pytest.fixture
def bob():
    return Principal(login="bob", roles=frozenset({Role.USER}))


@pytest.fixture
def admin():
    return Principal(login="admin1", roles=frozenset({Role.ADMIN, Role.USER}))


def make_nap(**overrides) -> NapWrite:
    """A finished 90-minute nap on 2024-01-01 unless overridden."""
    data = {
        "start_time": datetime(2024, 1, 1, 13, 0),
        "end_time": datetime(2024, 1, 1, 14, 30),
        "rating": 7,
    }
    data.update(overrides)
    return NapWrite(**data)


def auth_header(login: str, *roles: Role) -> dict:
    token = create_access_token(login, roles or (Role.USER,))
    return {"Authorization": f"Bearer {token}"}
