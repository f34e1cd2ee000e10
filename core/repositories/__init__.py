"""
Repository pattern implementations for data access.

Usage:
    from core.repositories import UserRepository
    from core.db import db

    with db.session() as session:
        user = UserRepository(session).find_sso_user(42)
"""

from .base import BaseRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
]
