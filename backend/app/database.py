"""
Database session dependency for the API.

Initialization happens explicitly in main.py startup, not at import time.
"""

from core.db import db, get_db

__all__ = ["db", "get_db"]
