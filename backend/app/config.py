"""
Application configuration.

Re-exports the shared settings so routers can use relative imports:
    from ..config import get_settings
"""

from core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
