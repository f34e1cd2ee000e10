"""
Dashboard views.

Views hold the data a UI layer needs to draw a page; drawing itself is left to
whatever embeds the session client.
"""

from typing import Any

from core.logging import client_logger as logger

from .auth_service import AuthService, use_profile
from .history import History


class LoginView:
    """Login page: the SSO entry URL plus the username/password form action."""

    def __init__(self, history: History, auth: AuthService):
        self.history = history
        self.auth = auth
        self.sso_url = f"{auth.settings.api_root.rstrip('/')}/sso"
        self.error: str | None = None

    async def submit(self, user: str, password: str) -> dict[str, Any]:
        result = await self.auth.login(user, password)
        if "error" in result:
            self.error = result["error"]
        else:
            self.history.push(self.auth.get_pre_login_path())
        return result


class SSOCallbackView:
    """
    Landing page for the provider redirect.

    Exchanges the ``code`` query parameter for a session, then sends the user
    back to the page they were trying to reach.
    """

    def __init__(self, history: History, auth: AuthService):
        self.history = history
        self.auth = auth
        self.code = history.query.get("code")
        self.error: str | None = None
        self.done = False

    async def complete(self) -> dict[str, Any]:
        if not self.code:
            self.error = "Missing authorization code"
            self.done = True
            return {"error": self.error}

        result = await self.auth.verify_sso_code(self.code)
        self.done = True
        if "error" in result:
            self.error = result["error"]
            logger.warning("sso_callback_failed", error=self.error)
            return result

        self.history.push(self.auth.get_pre_login_path())
        return result


class DashboardView:
    """Landing page for authorized users; tracks the profile cell."""

    def __init__(self, history: History, auth: AuthService):
        self.history = history
        self.auth = auth
        self._profile = use_profile(auth)

    @property
    def profile(self) -> dict | None:
        return self._profile.value

    def close(self) -> None:
        self._profile.close()

    async def logout(self) -> None:
        self.close()
        await self.auth.logout()
