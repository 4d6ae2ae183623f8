"""Shared pytest fixtures.

Every test gets its own in-memory SQLite database (StaticPool keeps the
single connection alive across sessions and TestClient threads).
"""

import os

# Must be set before foodieai.db builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import foodieai.models  # noqa: F401  (registers tables)
from foodieai import products
from foodieai.cache import InMemoryTTLStore
from foodieai.config import config
from foodieai.db import Base, get_db


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """No dev bypass, unverified JWTs, fresh de-dup cache for every test."""
    monkeypatch.setattr(config, "DEV_AUTH_BYPASS_SUB", None)
    monkeypatch.setattr(config, "OAUTH_TOKEN_SECRET", None)
    monkeypatch.setattr(products, "dedup_store", InMemoryTTLStore())


@pytest.fixture
def client(session_factory):
    from foodieai.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_token():
    """Factory for HS256 access tokens."""

    def _make(subject: str = "user-sub-1", secret: str = "test-secret", **claims) -> str:
        payload = {"sub": subject}
        payload.update(claims)
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make


@pytest.fixture
def auth_headers(make_token):
    return {"Authorization": f"Bearer {make_token()}"}
