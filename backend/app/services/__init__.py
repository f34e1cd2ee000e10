"""
Backend services for Dashgate.
"""

from . import user_service

__all__ = [
    "user_service",
]
