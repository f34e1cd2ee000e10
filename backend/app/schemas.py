"""
Pydantic schemas for request and response validation.
"""

from pydantic import BaseModel, ConfigDict, Field


class UserDto(BaseModel):
    """Client-safe projection of a user record."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    username: str
    account_id: int | None = Field(default=None, alias="accountID")
    is_admin: bool = Field(default=False, alias="isAdmin")
    email: str | None = None


class SSOVerifyRequest(BaseModel):
    code: str = Field(min_length=1)


class TokenVerifyRequest(BaseModel):
    token: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    """Profile and session token returned by the SSO and verify endpoints."""

    profile: UserDto
    token: str
