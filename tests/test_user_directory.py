"""Tests for the user repository and the user directory service."""

from backend.app.auth.github_oauth import GithubUser
from backend.app.services import user_service
from core.models import User
from core.repositories import UserRepository


def test_create_sso_user_defaults(test_session):
    repo = UserRepository(test_session)
    user = repo.create_sso_user(account_id=42, username="alice", email="a@x.com")

    assert user.id is not None
    assert user.is_sso is True
    assert user.is_admin is False
    assert user.password is None


def test_find_sso_user_ignores_non_sso_records(test_session):
    test_session.add(User(username="alice", account_id=42, is_sso=False))
    test_session.flush()

    repo = UserRepository(test_session)
    assert repo.find_by_account_id(42) is not None
    assert repo.find_sso_user(42) is None


def test_find_or_create_is_idempotent(test_session):
    github_user = GithubUser(id=42, login="alice", email="a@x.com")

    first = user_service.find_or_create_sso_user(test_session, github_user)
    second = user_service.find_or_create_sso_user(test_session, github_user)

    assert first.id == second.id
    assert test_session.query(User).count() == 1


def test_find_by_username(sso_user, test_session):
    assert user_service.find_by_username(test_session, "alice").id == sso_user.id
    assert user_service.find_by_username(test_session, "nobody") is None


def test_build_user_dto_aliases(sso_user):
    dto = user_service.build_user_dto(sso_user)

    assert dto.model_dump(by_alias=True) == {
        "id": sso_user.id,
        "username": "alice",
        "accountID": 42,
        "isAdmin": False,
        "email": "a@x.com",
    }


def test_get_by_username_prefers_oldest_record(test_session):
    repo = UserRepository(test_session)
    first = repo.create(username="alice", account_id=1, is_sso=False)
    repo.create_sso_user(account_id=42, username="alice")

    assert repo.get_by_username("alice").id == first.id
    assert repo.find_by_account_id(1) is first
