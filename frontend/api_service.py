"""
Request helper for the Dashgate API.

Every call returns either the decoded JSON body or an exception instance;
nothing here raises for transport or server errors, so callers check
``isinstance(result, Exception)`` before using a result.
"""

from typing import TYPE_CHECKING, Any

import httpx

from core.config import get_settings
from core.constants import BEARER_PREFIX
from core.logging import client_logger as logger

if TYPE_CHECKING:
    from .auth_service import AuthService


class ApiError(Exception):
    """The API answered with an error status, or a token was required and missing."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(ApiError):
    """The API could not be reached."""


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or body)
    return str(body)


class ApiService:
    """
    Thin async wrapper over httpx for the dashboard's API calls.

    Args:
        auth: Session client consulted for a token when a request requires one.
        api_root: Base URL, e.g. "http://localhost:3000/api".
        client: Optional preconfigured ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        auth: "AuthService",
        api_root: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.auth = auth
        self.api_root = (api_root or get_settings().api_root).rstrip("/")
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str) -> Any:
        # No token yet: that is what logging in is for
        return await self.post("login", {"email": email, "password": password}, require_token=False)

    async def verify_sso_code(self, code: str) -> Any:
        return await self.post("sso/verify", {"code": code}, require_token=False)

    async def verify_token(self, token: str) -> Any:
        """
        Verify a token and receive a fresh one.

        require_token must stay False: requiring a token calls
        check_authorization_status(), which calls this method.
        """
        return await self.post("auth/verify", {"token": token}, require_token=False)

    async def get_current_user(self) -> Any:
        return await self.get("user/me")

    # ------------------------------------------------------------------
    # Generic requestor
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        endpoint: str,
        data: dict | None = None,
        require_token: bool = True,
        **options: Any,
    ) -> Any:
        """
        Send a request and return the JSON body or an exception instance.

        Args:
            method: HTTP method.
            endpoint: Path below the API root, e.g. "sso/verify".
            data: Query parameters for GET, JSON body otherwise.
            require_token: Wait for the session client to confirm a token and
                send it as a bearer header. Fails fast with ApiError when the
                session is not authorized.
            options: Passed through to ``httpx.AsyncClient.request``.
        """
        method = method.upper()
        url = f"{self.api_root}/{endpoint.lstrip('/')}"
        data = data or {}
        headers = dict(options.pop("headers", None) or {})

        if require_token:
            # Only hits the server the first time; cached afterwards
            token = await self.auth.check_authorization_status()
            if not token:
                logger.error("request_not_authorized", url=url)
                return ApiError("Not authorized", status_code=401)
            headers["Authorization"] = f"{BEARER_PREFIX} {token}"

        try:
            response = await self.client.request(
                method,
                url,
                params=data if method == "GET" and data else None,
                json=None if method == "GET" else data,
                headers=headers,
                **options,
            )
        except httpx.HTTPError as exc:
            logger.error("request_transport_error", url=url, error=str(exc))
            return TransportError(f"Error requesting {url}: {exc}")

        if response.is_error:
            detail = _error_detail(response)
            logger.error("request_failed", url=url, status_code=response.status_code, detail=detail)
            return ApiError(detail, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return ApiError(f"Invalid JSON from {url}", status_code=response.status_code)

    async def get(self, endpoint: str, data: dict | None = None, require_token: bool = True, **options: Any) -> Any:
        return await self.request("GET", endpoint, data, require_token=require_token, **options)

    async def post(self, endpoint: str, data: dict | None = None, require_token: bool = True, **options: Any) -> Any:
        return await self.request("POST", endpoint, data, require_token=require_token, **options)

    async def put(self, endpoint: str, data: dict | None = None, require_token: bool = True, **options: Any) -> Any:
        return await self.request("PUT", endpoint, data, require_token=require_token, **options)
