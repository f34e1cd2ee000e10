"""
ORM models used by the API, re-exported from core.models.
"""

from core.models import Base, User

__all__ = ["Base", "User"]
