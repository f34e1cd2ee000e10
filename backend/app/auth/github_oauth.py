"""
GitHub OAuth delegate.

Exchanges an authorization code for an access token and fetches the
authorizing user's profile. Failures surface as ``AuthError``; nothing here
retries.
"""

from dataclasses import dataclass

import httpx

from core.logging import oauth_logger as logger

from ..config import get_settings


class AuthError(Exception):
    """Raised when the identity provider rejects a request or cannot be reached."""


class MissingToken(AuthError):
    """Raised when a profile fetch is attempted without an access token."""


@dataclass(frozen=True)
class GithubUser:
    id: int
    login: str
    email: str | None = None


def build_authorize_url() -> str:
    """Build the GitHub authorize URL carrying client ID and callback URI."""
    settings = get_settings()
    # Convert AnyHttpUrl to string to avoid serialization issues
    redirect_uri = str(settings.github_callback_url) if settings.github_callback_url else ""
    params = httpx.QueryParams(
        {
            key: value
            for key, value in {
                "client_id": settings.github_client_id,
                "redirect_uri": redirect_uri,
            }.items()
            if value
        }
    )
    return f"{settings.github_oauth_url}/authorize?{params}"


def _client(client: httpx.Client | None) -> httpx.Client:
    return client or httpx.Client(timeout=get_settings().github_timeout)


def exchange_code(code: str, client: httpx.Client | None = None) -> str:
    """
    Exchange a GitHub OAuth code for an access token.

    Raises:
        AuthError: On a non-200 response, a transport error, or a response
            without an access token.
    """
    settings = get_settings()
    payload = {
        "code": code,
        "client_id": settings.github_client_id,
        "client_secret": settings.github_client_secret,
    }
    headers = {"Accept": "application/json"}

    http = _client(client)
    try:
        response = http.post(f"{settings.github_oauth_url}/access_token", json=payload, headers=headers)
    except httpx.HTTPError as exc:
        logger.warning("oauth_code_exchange_transport_error", error=str(exc))
        raise AuthError("Error during authentication") from exc
    finally:
        if client is None:
            http.close()

    if response.status_code != 200:
        logger.warning("oauth_code_exchange_rejected", status_code=response.status_code)
        raise AuthError("Error during code conversion to the token")

    access_token = response.json().get("access_token")
    if not access_token:
        # GitHub answers 200 with an error body for bad or reused codes
        logger.warning("oauth_code_exchange_no_token", error=response.json().get("error"))
        raise AuthError("Error during code conversion to the token")
    return access_token


def fetch_profile(access_token: str, client: httpx.Client | None = None) -> GithubUser:
    """
    Fetch the GitHub user profile for an OAuth access token.

    Raises:
        MissingToken: If access_token is empty.
        AuthError: On a non-200 response or a transport error.
    """
    if not access_token:
        raise MissingToken("Please, provide a user token")

    settings = get_settings()
    headers = {"Authorization": f"token {access_token}"}

    http = _client(client)
    try:
        response = http.get(settings.github_api_user_url, headers=headers)
    except httpx.HTTPError as exc:
        logger.warning("oauth_profile_transport_error", error=str(exc))
        raise AuthError("Error during authentication") from exc
    finally:
        if client is None:
            http.close()

    if response.status_code != 200:
        logger.warning("oauth_profile_rejected", status_code=response.status_code)
        raise AuthError("Cant get user profile")

    data = response.json()
    return GithubUser(id=data["id"], login=data["login"], email=data.get("email"))
