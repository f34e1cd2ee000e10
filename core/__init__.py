"""
Dashgate Core Library.

Shared configuration, logging, database management, models and repositories
used by the API server (``backend``) and the dashboard session client
(``frontend``).

Usage:
    from core.config import get_settings
    from core.db import db, get_db
    from core.logging import get_logger
    from core.models import User
    from core.repositories import UserRepository
"""

__version__ = "1.0.0"
