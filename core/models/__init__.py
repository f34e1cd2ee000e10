"""
SQLAlchemy models for Dashgate.

Usage:
    from core.models import User
"""

from .base import Base
from .user import User

__all__ = [
    "Base",
    "User",
]
