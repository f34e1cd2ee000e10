"""
User SQLAlchemy model.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class User(Base):
    """
    A dashboard user.

    Attributes:
        username: Login name. Not unique: an SSO user and a password user
            may share one.
        password: Password hash, only set for password accounts
        account_id: Identity provider (GitHub) account ID for SSO users
        is_admin: Grants access to admin-only endpoints
        is_sso: True when the record was created by an SSO login
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(255), index=True)
    password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    is_sso: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} sso={self.is_sso}>"
