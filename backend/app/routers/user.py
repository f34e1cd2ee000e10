"""
User router. Mounted behind the identity gate.
"""

from fastapi import APIRouter, Request

from ..schemas import UserDto

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/me", response_model=UserDto)
def current_user(request: Request) -> UserDto:
    """Get the user the identity gate resolved for this request."""
    return request.state.user
