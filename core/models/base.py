"""
Declarative base shared by all Dashgate models.
"""

from core.db import Base

__all__ = ["Base"]
