# tests/conftest.py
import os

# Settings are read from the environment on first use
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from osm_api import create_app
from osm_api.config import get_settings
from osm_api.database import get_db
from osm_api.utils.security import PasswordHasher
from osm_api.utils.tokens import SessionTokenIssuer
from tests.support import FakeConnection, InMemoryStore, build_test_settings


@pytest.fixture
def settings():
    return build_test_settings()


@pytest.fixture
def store(monkeypatch):
    return InMemoryStore().install(monkeypatch)


@pytest.fixture
def conn():
    return FakeConnection()


@pytest.fixture
def hasher(settings):
    return PasswordHasher(settings.bcrypt_rounds)


@pytest.fixture
def issuer(settings):
    return SessionTokenIssuer(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        expire_minutes=settings.access_token_expire_minutes
    )


@pytest.fixture
def app(settings, conn):
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_db] = lambda: conn
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app, store):
    # Not entered as a context manager: lifespan would open a real pool
    return TestClient(app)
