"""API fixtures: a TestClient bound to the per-test in-memory database."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from backend.app.auth.jwt import create_access_token
from backend.app.database import get_db
from backend.app.main import create_app
from backend.app.models import User


@pytest.fixture
def test_app_client(test_db) -> Iterator[tuple[TestClient, sessionmaker]]:
    _, TestingSessionLocal, _ = test_db
    app = create_app()

    def override_get_db() -> Iterator[Session]:
        session = TestingSessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client, TestingSessionLocal


@pytest.fixture
def authorized_client(test_app_client) -> Iterator[tuple[TestClient, User, sessionmaker]]:
    """Client sending a valid bearer token for a stored SSO user."""
    client, TestingSessionLocal = test_app_client
    with TestingSessionLocal() as session:
        user = User(username="tester", email="tester@example.com", account_id=7, is_sso=True)
        session.add(user)
        session.commit()
        session.refresh(user)

    client.headers["Authorization"] = f"Bearer {create_access_token(user.username)}"
    yield client, user, TestingSessionLocal
