"""
Dashgate dashboard session layer.

Holds the session token and authorization state for the dashboard and gates
private routes on it. Talks to the Dashgate API over HTTP.
"""

from .api_service import ApiError, ApiService, TransportError
from .app import App
from .auth_service import (
    AuthorizationStatus,
    AuthService,
    get_auth_service,
    set_auth_service,
    use_is_authorized,
    use_profile,
)
from .functional_state import FunctionalState, StateBinding, use_functional_state
from .history import History
from .routes import AppRoute, Routes
from .storage import LocalStorage

__all__ = [
    "ApiError",
    "ApiService",
    "App",
    "AppRoute",
    "AuthService",
    "AuthorizationStatus",
    "FunctionalState",
    "History",
    "LocalStorage",
    "Routes",
    "StateBinding",
    "TransportError",
    "get_auth_service",
    "set_auth_service",
    "use_functional_state",
    "use_is_authorized",
    "use_profile",
]
