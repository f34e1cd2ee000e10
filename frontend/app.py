"""
Client entry point.

Wires the process-wide session client to the route table: starts the token
refresh timer, renders the view for the current location, and renders again
whenever the location changes, a full reload is forced, or a gated route
finishes waiting for the authorization flag.

Usage:
    app = App()
    view = app.start()                  # inside the running event loop
    ...
    app.stop()
"""

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any

from core.logging import client_logger as logger

from .auth_service import AuthService, get_auth_service, use_is_authorized
from .functional_state import StateBinding
from .routes import Routes
from .views import SSOCallbackView


class App:
    """
    The running dashboard client.

    Args:
        auth: Session client; defaults to the process-wide one.
        routes: Route table; defaults to the dashboard's own.
    """

    def __init__(self, auth: AuthService | None = None, routes: Routes | None = None):
        self.auth = auth or get_auth_service()
        self.history = self.auth.history
        self.routes = routes or Routes(auth=self.auth)
        self.view: Any = None

        self._unlisten: list[Callable[[], None]] = []
        self._status: StateBinding | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._status is not None

    def start(self) -> Any:
        """Start the client and return the first rendered view (None while gated)."""
        if self.running:
            return self.view

        self.auth.start_refresh_timer()
        self._unlisten = [
            self.history.listen(self._on_navigate),
            self.history.on_reload(self._on_reload),
        ]
        self._status = use_is_authorized(auth=self.auth)
        self._status.watch(self._on_status)

        logger.info("app_started", location=self.history.location)
        return self.render()

    def stop(self) -> None:
        for unlisten in self._unlisten:
            unlisten()
        self._unlisten = []
        if self._status is not None:
            self._status.close()
            self._status = None

        self._close_view()
        self.routes.unmount()
        for task in list(self._tasks):
            task.cancel()
        self.auth.stop_refresh_timer()
        logger.info("app_stopped")

    def render(self) -> Any:
        """Replace the current view with the one for the current location."""
        self._close_view()
        self.view = self.routes.render(self.history)
        logger.debug("app_rendered", location=self.history.location, view=type(self.view).__name__)

        if isinstance(self.view, SSOCallbackView):
            self._spawn(self.view.complete())
        return self.view

    def _close_view(self) -> None:
        close = getattr(self.view, "close", None)
        if close is not None:
            close()
        self.view = None

    def _spawn(self, coro: Coroutine) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_navigate(self, url: str) -> None:
        self.render()

    def _on_reload(self) -> None:
        # Full reload: every route binding goes, gates ask again
        self.routes.unmount()
        self.render()

    def _on_status(self, status: Any) -> None:
        # Route bindings are notified after this one; render once they have caught up
        asyncio.get_running_loop().call_soon(self._render_if_gated)

    def _render_if_gated(self) -> None:
        if self.running and self.view is None:
            self.render()
