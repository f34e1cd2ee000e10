"""User repository backing the user directory."""

from core.logging import get_logger
from core.models import User

from .base import BaseRepository

logger = get_logger("repository.user")


class UserRepository(BaseRepository[User]):
    """Lookups and inserts for dashboard users."""

    model = User

    def get_by_username(self, username: str) -> User | None:
        """Oldest user with the given username. Usernames are not unique."""
        return self.first_where(User.username == username)

    def find_by_account_id(self, account_id: int) -> User | None:
        """Any user linked to an identity provider account, SSO-created or not."""
        return self.first_where(User.account_id == account_id)

    def find_sso_user(self, account_id: int) -> User | None:
        """The user an SSO login created for this provider account."""
        return self.first_where(User.account_id == account_id, User.is_sso.is_(True))

    def create_sso_user(self, account_id: int, username: str, email: str | None = None) -> User:
        """Insert a user on first SSO login. SSO users never start as admins."""
        user = self.create(
            account_id=account_id,
            username=username,
            email=email,
            is_sso=True,
            is_admin=False,
        )
        logger.info("sso_user_created", user_id=user.id, account_id=account_id, username=username)
        return user
