"""
Pytest fixtures for Dashgate tests.

Settings are read once and cached, so the environment is fixed here before
any application module is imported.
"""

import os

os.environ.setdefault("ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("GITHUB_CLIENT_ID", "test-client-id")
os.environ.setdefault("GITHUB_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("GITHUB_CALLBACK_URL", "http://localhost:3001/sso/callback")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.db import Base  # noqa: E402
from core.models import User  # noqa: E402


@pytest.fixture(scope="function")
def test_db():
    """Fresh in-memory SQLite database per test."""
    db_url = "sqlite://"
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    yield db_url, TestingSessionLocal, engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    _, TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def sso_user(test_session):
    """An SSO user already in the directory."""
    user = User(username="alice", email="a@x.com", account_id=42, is_sso=True, is_admin=False)
    test_session.add(user)
    test_session.commit()
    test_session.refresh(user)
    return user
