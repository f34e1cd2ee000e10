"""
Route table and authorization gate for the dashboard.

A private route renders nothing until the session client has resolved the
authorization flag, then either renders its view or sends the user to the
login page, remembering where they were headed.
"""

import asyncio
from collections.abc import Callable
from typing import Any

from core.constants import DASHBOARD_PATH, LOGIN_PATH, SSO_CALLBACK_PATH
from core.logging import client_logger as logger

from .auth_service import AuthorizationStatus, AuthService, get_auth_service, use_is_authorized
from .functional_state import StateBinding
from .history import History
from .views import DashboardView, LoginView, SSOCallbackView

Component = Callable[..., Any]


class AppRoute:
    """
    One entry in the route table.

    Args:
        path: Path the route answers, e.g. "/dashboard".
        component: Called as ``component(history=..., auth=...)`` to build the view.
        is_private: Gate the view behind the authorization flag.
        exact: Match only the path itself, not paths below it.
        auth: Session client; defaults to the process-wide one.
    """

    def __init__(
        self,
        path: str,
        component: Component,
        is_private: bool = False,
        exact: bool = True,
        auth: AuthService | None = None,
    ):
        self.path = path
        self.component = component
        self.is_private = is_private
        self.exact = exact
        self._auth = auth
        self._binding: StateBinding | None = None

    @property
    def auth(self) -> AuthService:
        return self._auth or get_auth_service()

    def matches(self, pathname: str) -> bool:
        if self.exact:
            return pathname == self.path
        return pathname == self.path or pathname.startswith(self.path.rstrip("/") + "/")

    @property
    def mounted(self) -> bool:
        return self._binding is not None

    def mount(self) -> StateBinding:
        """
        Bind to the authorization flag.

        An unresolved flag schedules one status check per mount, so this must
        run inside the event loop. Mounting twice returns the same binding.
        """
        if self._binding is None:
            self._binding = use_is_authorized(check_status_if_unresolved=True, auth=self.auth)
        return self._binding

    def unmount(self) -> None:
        if self._binding is not None:
            self._binding.close()
            self._binding = None

    def render(self, history: History) -> Any:
        """
        Build the view for the current location, or None.

        None means "render nothing": either the flag is still unresolved or a
        redirect to the login page has been scheduled.
        """
        if not self.is_private:
            return self.component(history=history, auth=self.auth)

        status = self.mount().value
        if status is AuthorizationStatus.UNRESOLVED:
            return None

        if status is AuthorizationStatus.UNAUTHORIZED:
            self.auth.store_pre_login_path(history.pathname)
            logger.info("route_redirect_login", path=history.pathname)
            # Navigate after the current render pass, not during it
            asyncio.get_running_loop().call_soon(history.push, LOGIN_PATH)
            return None

        return self.component(history=history, auth=self.auth)

    def __repr__(self) -> str:
        return f"<AppRoute(path={self.path!r}, private={self.is_private})>"


ROUTE_DEFINITIONS: list[dict[str, Any]] = [
    {"path": LOGIN_PATH, "component": LoginView},
    {"path": SSO_CALLBACK_PATH, "component": SSOCallbackView},
    {"path": DASHBOARD_PATH, "component": DashboardView, "is_private": True},
]


class Routes:
    """The dashboard's route table. First match wins."""

    def __init__(
        self,
        definitions: list[dict[str, Any]] | None = None,
        auth: AuthService | None = None,
    ):
        self.routes = [
            AppRoute(auth=auth, **definition)
            for definition in (definitions if definitions is not None else ROUTE_DEFINITIONS)
        ]

    def match(self, pathname: str) -> AppRoute | None:
        for route in self.routes:
            if route.matches(pathname):
                return route
        return None

    def render(self, history: History) -> Any:
        route = self.match(history.pathname)
        if route is None:
            return None
        return route.render(history)

    def unmount(self) -> None:
        for route in self.routes:
            route.unmount()
