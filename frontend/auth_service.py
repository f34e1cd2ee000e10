"""
Dashboard session client.

Owns the session token (in memory and in durable storage), the
authorization flag, the cached profile and the background refresh timer.
State lives in FunctionalState cells so views can bind to it.

One AuthService serves the whole process. Build it once at startup with
``get_auth_service()``; it lives until the process exits.

Usage:
    auth = get_auth_service()
    auth.start_refresh_timer()          # inside the running event loop
    token = await auth.check_authorization_status()
"""

import asyncio
import enum
import time
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.config import Settings, get_settings
from core.constants import (
    DEFAULT_PRE_LOGIN_PATH,
    LOGIN_PATH,
    PRE_LOGIN_PATH_KEY_SUFFIX,
    TOKEN_CACHE_KEY_SUFFIX,
)
from core.logging import client_logger as logger

from .api_service import ApiService
from .functional_state import FunctionalState, StateBinding, use_functional_state
from .history import History
from .storage import LocalStorage, storage_key

REFRESH_JOB_ID = "refresh_token"


class AuthorizationStatus(enum.Enum):
    """Authorization flag. UNRESOLVED means the server has not been asked yet."""

    UNRESOLVED = "unresolved"
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"


class AuthService:
    """
    Session state and the operations that move it.

    Invariant: the flag is AUTHORIZED only while a token is stored and the
    server has confirmed it during this process's lifetime.
    """

    def __init__(
        self,
        storage: LocalStorage | None = None,
        api: ApiService | None = None,
        history: History | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.settings = settings

        self.is_authorized_state = FunctionalState(AuthorizationStatus.UNRESOLVED)
        # Authenticated user's profile, as returned by the API
        self.profile_state = FunctionalState(None)
        self.token_state = FunctionalState(None)

        self.storage = storage or LocalStorage(settings.storage_path)
        self.api = api or ApiService(self, api_root=settings.api_root)
        self.history = history or History()

        self.token_cache_key = storage_key(settings.storage_namespace, TOKEN_CACHE_KEY_SUFFIX)
        self.pre_login_path_key = storage_key(settings.storage_namespace, PRE_LOGIN_PATH_KEY_SUFFIX)

        self._pre_login_path: str | None = None
        self._pending_check: asyncio.Task | None = None
        self._background_tasks: set[asyncio.Task] = set()
        self._scheduler: AsyncIOScheduler | None = None

    # ------------------------------------------------------------------
    # Authorization flag
    # ------------------------------------------------------------------

    def is_authorized(self) -> AuthorizationStatus:
        """Current flag value. Does not ask the server; see check_authorization_status."""
        return self.is_authorized_state.get_value()

    def set_is_authorized(self, status: AuthorizationStatus) -> None:
        self.is_authorized_state.set_value(status)

    # ------------------------------------------------------------------
    # Login flows
    # ------------------------------------------------------------------

    async def login(self, user: str, password: str) -> dict[str, Any]:
        """Log in with a username and password. Returns {"success", "profile"} or {"error"}."""
        return self._complete_login(await self.api.login(user, password))

    async def verify_sso_code(self, code: str) -> dict[str, Any]:
        """Finish SSO with the provider's code. Returns {"success", "profile"} or {"error"}."""
        return self._complete_login(await self.api.verify_sso_code(code))

    def _complete_login(self, result: Any) -> dict[str, Any]:
        if isinstance(result, Exception):
            self.set_is_authorized(AuthorizationStatus.UNAUTHORIZED)
            return {"error": str(result)}

        token, profile = result["token"], result["profile"]
        self.set_token(token)
        self.set_is_authorized(AuthorizationStatus.AUTHORIZED)
        self.set_profile(profile)
        logger.info("login_success", username=profile.get("username"))

        return {"success": True, "profile": profile}

    async def logout(self) -> None:
        self.clear_token()

    # ------------------------------------------------------------------
    # Status checks and refresh
    # ------------------------------------------------------------------

    async def check_authorization_status(self) -> str | bool:
        """
        Resolve the authorization flag, asking the server at most once.

        Once resolved the answer is cached: the stored token when authorized,
        False otherwise. While unresolved, a stored token is verified with the
        server; callers arriving mid-check share that one request.

        A failed check does not clear the stored token; only clear_token does.
        """
        status = self.is_authorized()
        if status is AuthorizationStatus.AUTHORIZED:
            return self.get_token() or False
        if status is AuthorizationStatus.UNAUTHORIZED:
            return False

        if self._pending_check is None:
            self._pending_check = asyncio.ensure_future(self._resolve_authorization())
        return await asyncio.shield(self._pending_check)

    async def _resolve_authorization(self) -> str | bool:
        try:
            token = self.get_token()
            if not token:
                # No token: no need to ask the API
                self.set_is_authorized(AuthorizationStatus.UNAUTHORIZED)
                return False

            new_token = await self.refresh_token()
            if not new_token:
                self.set_is_authorized(AuthorizationStatus.UNAUTHORIZED)
                return False

            self.set_is_authorized(AuthorizationStatus.AUTHORIZED)
            return self.get_token()
        finally:
            self._pending_check = None

    def schedule_status_check(self) -> asyncio.Task:
        """Run check_authorization_status in the background on the running loop."""
        task = asyncio.get_running_loop().create_task(self.check_authorization_status())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def refresh_token(self) -> str | bool | None:
        """
        Exchange the stored token for a fresh one.

        Returns:
            The new token, None when no token is stored, False when the server
            rejected the token or could not be reached. Storage is left
            untouched on failure.
        """
        token = self.get_token()
        if not token:
            return None

        result = await self.api.verify_token(token)
        if isinstance(result, Exception):
            logger.warning(
                "token_refresh_failed",
                error=str(result),
                status_code=getattr(result, "status_code", None),
            )
            return False

        new_token = result["token"]
        self.set_token(new_token)
        self.set_profile(result.get("profile"))
        return new_token

    def start_refresh_timer(self) -> None:
        """
        Refresh the token on a fixed interval for the rest of the process.

        The interval is a fraction (TOKEN_REFRESH_RATIO) of the token
        lifetime, so a live session never sees its token expire. Must be
        called from inside the running event loop. Calling it again is a
        no-op. Without a stored token each tick does nothing.
        """
        if self._scheduler is not None:
            return

        scheduler = AsyncIOScheduler(timezone="UTC")
        scheduler.add_job(
            self.refresh_token,
            IntervalTrigger(seconds=self.settings.token_refresh_interval_seconds),
            id=REFRESH_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            "refresh_timer_started",
            interval_seconds=self.settings.token_refresh_interval_seconds,
        )

    @property
    def refresh_scheduler(self) -> AsyncIOScheduler | None:
        return self._scheduler

    def stop_refresh_timer(self) -> None:
        """Stop the refresh timer. Only needed when the process is shutting down."""
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None

    # ------------------------------------------------------------------
    # Profile and token storage
    # ------------------------------------------------------------------

    def set_profile(self, profile: dict | None) -> None:
        self.profile_state.set_value(profile)
        logger.debug("current_user", profile=profile)

    def get_token(self) -> str | None:
        """Current token, hydrated from durable storage on first read. Not validated."""
        token = self.token_state.get_value()
        if token:
            return token

        cached = self.storage.get_item(self.token_cache_key)
        self.token_state.set_value(cached)
        return cached

    def set_token(self, token: str) -> None:
        self.storage.set_item(self.token_cache_key, token)
        self.token_state.set_value(token)

    def clear_token(self) -> None:
        """
        Forget the session and return to the login view.

        Removes the durable token and pre-login path, clears the profile, and
        forces a full reload so no view keeps stale state.
        """
        self.storage.remove_item(self.token_cache_key)
        self.storage.remove_item(self.pre_login_path_key)
        self._pre_login_path = None
        self.token_state.set_value(None)
        self.profile_state.set_value({})
        self.set_is_authorized(AuthorizationStatus.UNAUTHORIZED)
        # Timestamp busts any cached login view
        self.history.assign(f"{LOGIN_PATH}?_={int(time.time() * 1000)}", reload=True)

    # ------------------------------------------------------------------
    # Pre-login path
    # ------------------------------------------------------------------

    def store_pre_login_path(self, current_path: str) -> None:
        """Remember the private path the user was redirected away from."""
        self._pre_login_path = current_path
        self.storage.set_item(self.pre_login_path_key, current_path)

    def get_pre_login_path(self) -> str:
        """Where to go after login: the last private path requested, or the root."""
        if self._pre_login_path:
            return self._pre_login_path

        cached = self.storage.get_item(self.pre_login_path_key)
        if cached:
            return cached

        return DEFAULT_PRE_LOGIN_PATH


# =============================================================================
# Process-wide instance
# =============================================================================

_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get the process-wide session client, creating it on first use."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service


def set_auth_service(service: AuthService | None) -> None:
    """Install (or with None, drop) the process-wide session client."""
    global _auth_service
    _auth_service = service


# =============================================================================
# Bindings
# =============================================================================


def use_is_authorized(
    check_status_if_unresolved: bool = False,
    auth: AuthService | None = None,
) -> StateBinding:
    """
    Bind to the authorization flag.

    With ``check_status_if_unresolved`` an unresolved flag triggers a
    background status check, which moves the flag to AUTHORIZED or
    UNAUTHORIZED and notifies the binding.
    """
    auth = auth or get_auth_service()
    binding = use_functional_state(auth.is_authorized_state)
    if check_status_if_unresolved and binding.value is AuthorizationStatus.UNRESOLVED:
        auth.schedule_status_check()
    return binding


def use_profile(auth: AuthService | None = None) -> StateBinding:
    auth = auth or get_auth_service()
    return use_functional_state(auth.profile_state)
