"""
Authentication router: GitHub SSO, token verification and password login.

These routes are mounted without the identity gate; they are how a client
obtains a token in the first place.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from core.logging import get_logger

from ..auth.dependencies import resolve_token_user
from ..auth.github_oauth import AuthError, build_authorize_url, exchange_code, fetch_profile
from ..auth.jwt import create_access_token
from ..database import get_db
from ..schemas import LoginRequest, SessionResponse, SSOVerifyRequest, TokenVerifyRequest
from ..services import user_service

logger = get_logger("auth")

router = APIRouter(tags=["auth"])


@router.get("/sso")
def sso_redirect():
    """Redirect the browser to the GitHub authorization page."""
    return RedirectResponse(url=build_authorize_url(), status_code=status.HTTP_302_FOUND)


@router.post("/sso/verify", response_model=SessionResponse)
def verify_sso_code(payload: SSOVerifyRequest, db: Session = Depends(get_db)) -> SessionResponse:
    """
    Complete the SSO flow for a GitHub authorization code.

    Flow:
    1. Exchange the code for a GitHub access token
    2. Fetch the GitHub profile
    3. Find the SSO user for the GitHub account ID, creating it on first login
    4. Issue a session token and return it with the user DTO
    """
    try:
        access_token = exchange_code(payload.code)
    except AuthError as exc:
        logger.warning("sso_code_exchange_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_406_NOT_ACCEPTABLE,
            detail="No access token",
        ) from None

    try:
        github_user = fetch_profile(access_token)
    except AuthError as exc:
        logger.warning("sso_profile_fetch_failed", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from None

    user = user_service.find_or_create_sso_user(db, github_user)
    token = create_access_token(user.username)

    logger.info("sso_login_success", user_id=user.id, username=user.username)
    return SessionResponse(profile=user_service.build_user_dto(user), token=token)


@router.post("/auth/verify", response_model=SessionResponse)
def verify_token(payload: TokenVerifyRequest, db: Session = Depends(get_db)) -> SessionResponse:
    """
    Validate a session token and hand back a fresh one.

    The dashboard calls this on page load and on its refresh timer, so a
    successful verification also extends the session.
    """
    user = resolve_token_user(db, payload.token)
    token = create_access_token(user.username)

    logger.debug("token_refreshed", user_id=user.id)
    return SessionResponse(profile=user_service.build_user_dto(user), token=token)


@router.post("/login")
def login(payload: LoginRequest):
    """Username/password login. Accounts are SSO-only for now."""
    raise HTTPException(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        detail="Password login is not available",
    )
