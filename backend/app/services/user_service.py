"""
User directory service functions.
"""

from sqlalchemy.orm import Session

from core.logging import get_logger
from core.repositories import UserRepository

from ..auth.github_oauth import GithubUser
from ..models import User
from ..schemas import UserDto

logger = get_logger("services.user")


def build_user_dto(user: User) -> UserDto:
    """Project a user record onto the fields clients are allowed to see."""
    return UserDto(
        id=user.id,
        username=user.username,
        account_id=user.account_id,
        is_admin=bool(user.is_admin),
        email=user.email,
    )


def find_by_username(db: Session, username: str) -> User | None:
    return UserRepository(db).get_by_username(username)


def find_or_create_sso_user(db: Session, github_user: GithubUser) -> User:
    """
    Resolve the SSO user for a GitHub account, creating it on first login.

    Existing records are returned untouched; profile edits on GitHub do not
    flow back into the directory.
    """
    repo = UserRepository(db)
    user = repo.find_sso_user(github_user.id)
    if user:
        return user

    return repo.create_sso_user(
        account_id=github_user.id,
        username=github_user.login,
        email=github_user.email,
    )
