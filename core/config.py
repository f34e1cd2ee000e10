"""
Dashgate settings, read from the environment and an optional .env file.

Usage:
    from core.config import get_settings
    settings = get_settings()

Fixed values (route paths, storage key suffixes) live in core.constants:
    from core.constants import DEFAULT_PRE_LOGIN_PATH, LOGIN_PATH
"""

import os
import warnings
from functools import lru_cache
from typing import List, Optional

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import TOKEN_LIFETIME_SECONDS, TOKEN_REFRESH_RATIO

PLACEHOLDER_SECRETS = frozenset(
    {"change_me", "changeme", "secret", "your-secret-key", "jwt-secret", "supersecret", "development", "test"}
)
MIN_SECRET_LENGTH = 32


def _is_production_env(env: str) -> bool:
    return env.lower() in ("production", "prod")


class Settings(BaseSettings):
    """
    Settings shared by the API server and the dashboard session client.

    Production requires JWT_SECRET_KEY (at least 32 characters, not a
    placeholder) and the GitHub OAuth app credentials.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    app_name: str = "Dashgate"
    api_prefix: str = "/api"
    debug: bool = Field(default=False)
    env: str = Field(default="development", validation_alias="ENV")
    port: int = Field(default=3000, validation_alias="PORT")
    cors_allowed_origins: str = Field(default="http://localhost:3001", validation_alias="CORS_ALLOWED_ORIGINS")

    # User directory
    database_url: str = Field(default="sqlite:///dashgate.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")

    # GitHub OAuth app
    github_client_id: str = Field(default="", validation_alias="GITHUB_CLIENT_ID")
    github_client_secret: str = Field(default="", validation_alias="GITHUB_CLIENT_SECRET")
    github_callback_url: Optional[AnyHttpUrl] = Field(default=None, validation_alias="GITHUB_CALLBACK_URL")
    github_oauth_url: str = Field(default="https://github.com/login/oauth", validation_alias="GITHUB_OAUTH_URL")
    github_api_user_url: str = Field(default="https://api.github.com/user", validation_alias="GITHUB_API_USER_URL")
    github_timeout: float = Field(default=30.0, validation_alias="GITHUB_TIMEOUT")

    # Session tokens
    jwt_secret_key: str = Field(default="CHANGE_ME", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_seconds: int = Field(
        default=TOKEN_LIFETIME_SECONDS, gt=0, validation_alias="ACCESS_TOKEN_EXPIRE_SECONDS"
    )

    # Dashboard session client
    api_root: str = Field(default="http://localhost:3000/api", validation_alias="API_ROOT")
    storage_path: str = Field(default=".dashgate/storage.json", validation_alias="STORAGE_PATH")
    storage_namespace: str = Field(default="@dashgate", validation_alias="STORAGE_NAMESPACE")
    token_refresh_ratio: float = Field(default=TOKEN_REFRESH_RATIO, gt=0, le=1, validation_alias="TOKEN_REFRESH_RATIO")

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Reject weak secrets in production; warn about them anywhere else."""
        problem = None
        if v.lower() in PLACEHOLDER_SECRETS:
            problem = f"JWT_SECRET_KEY is a placeholder value ('{v}')"
        elif len(v) < MIN_SECRET_LENGTH:
            problem = f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters (got {len(v)})"

        if problem is None:
            return v
        if _is_production_env(os.getenv("ENV", "development")):
            raise ValueError(problem)
        warnings.warn(f"{problem}; set a real key before deploying", UserWarning, stacklevel=2)
        return v

    @property
    def is_production(self) -> bool:
        return _is_production_env(self.env)

    @property
    def cors_origins_list(self) -> List[str]:
        """CORS_ALLOWED_ORIGINS split on commas."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def token_refresh_interval_seconds(self) -> float:
        """Seconds between background token refreshes on the client."""
        return self.access_token_expire_seconds * self.token_refresh_ratio

    def validate_production_config(self) -> tuple[List[str], List[str]]:
        """
        Check the settings a deployment needs.

        Returns:
            (errors, warnings). main.py refuses to start in production when
            errors is non-empty.
        """
        errors: List[str] = []
        warnings_: List[str] = []

        if self.jwt_secret_key.lower() in PLACEHOLDER_SECRETS:
            errors.append("JWT_SECRET_KEY must be set for production")
        elif len(self.jwt_secret_key) < MIN_SECRET_LENGTH:
            errors.append(f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters")

        if not self.github_client_id:
            errors.append("GITHUB_CLIENT_ID is required for SSO")
        if not self.github_client_secret:
            errors.append("GITHUB_CLIENT_SECRET is required for SSO")
        if not self.github_callback_url:
            warnings_.append("GITHUB_CALLBACK_URL not set - GitHub will use the OAuth app's default callback")

        if "localhost" in self.cors_allowed_origins:
            warnings_.append("CORS allows localhost origins")

        return errors, warnings_


@lru_cache
def get_settings() -> Settings:
    """Settings for this process, read once."""
    return Settings()


__all__ = ["Settings", "get_settings"]
