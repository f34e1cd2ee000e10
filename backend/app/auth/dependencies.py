"""
Identity gate for protected FastAPI routes.

Every protected router depends on ``get_current_user``. Outcomes per request:
- no bearer token: 401
- token fails verification (bad signature, malformed, expired): 403
- token valid but its user no longer exists: 404
- otherwise the user DTO is attached to ``request.state.user``
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from core.logging import get_logger

from ..database import get_db
from ..models import User
from ..schemas import UserDto
from ..services import user_service
from .jwt import TokenError, verify_access_token

logger = get_logger("auth.gate")

# auto_error=False so a missing header maps to our own 401 detail
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


def resolve_token_user(db: Session, token: str | None) -> User:
    """
    Verify a session token and load the user it was issued for.

    Raises:
        HTTPException: 401 when no token is given, 403 when verification
            fails, 404 when the user does not exist.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        username = verify_access_token(token)
    except TokenError as exc:
        logger.info("token_rejected", reason=str(exc), error_type=type(exc).__name__)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        ) from None

    user = user_service.find_by_username(db, username)
    if not user:
        logger.info("token_user_missing", username=username)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> UserDto:
    """Resolve the authenticated user from the bearer token and attach it to the request."""
    user = resolve_token_user(db, token)
    profile = user_service.build_user_dto(user)
    request.state.user = profile
    return profile
