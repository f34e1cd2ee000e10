"""
Session token issuing and verification.

Tokens are stateless HS256 JWTs carrying the username and an expiry. There is
no server-side session store and no revocation list; logout is client-only.
"""

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from ..config import get_settings


class TokenError(ValueError):
    """Base class for token verification failures."""


class InvalidSignature(TokenError):
    """Token could not be cryptographically validated or is malformed."""


class TokenExpired(TokenError):
    """Token signature is valid but its expiry has passed."""


def create_access_token(username: str, issued_at: datetime | None = None) -> str:
    """
    Create a signed session token for a username.

    Args:
        username: Subject of the token.
        issued_at: Issue time, defaults to now. Expiry is issued_at plus the
            configured lifetime.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    issued_at = issued_at or datetime.now(timezone.utc)
    expire = issued_at + timedelta(seconds=settings.access_token_expire_seconds)
    claims = {
        "username": username,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> str:
    """
    Validate a session token and return the username it was issued for.

    Raises:
        TokenExpired: If the token has passed its expiry.
        InvalidSignature: If the token is malformed, signed with another key,
            or carries no username.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise TokenExpired("Token has expired") from exc
    except JWTError as exc:
        raise InvalidSignature("Invalid token") from exc

    username = payload.get("username")
    if not username:
        raise InvalidSignature("Token carries no username")
    return username

