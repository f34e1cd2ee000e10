"""
FastAPI application entry point.

Uses structured logging from core.logging module. Auth routes are public;
every other router is mounted behind the identity gate.
"""

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.db import db
from core.logging import RequestLoggingMiddleware, configure_logging, get_logger

from .auth.dependencies import get_current_user
from .config import get_settings
from .error_handlers import register_exception_handlers
from .routers import auth as auth_router
from .routers import user as user_router

settings = get_settings()
configure_logging(level="DEBUG" if settings.debug else "INFO")
logger = get_logger("api")


def check_production_config() -> None:
    """Log configuration problems; refuse to start in production if any are fatal."""
    errors, warnings = settings.validate_production_config()
    for warning in warnings:
        logger.warning("config_warning", message=warning)

    if not settings.is_production:
        return

    for error in errors:
        logger.error("config_error", error=error)
    if errors:
        raise RuntimeError("Invalid production configuration: " + "; ".join(errors))


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    )

    # Structured request logging middleware (also assigns request IDs)
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup."""
        logger.info("app_startup", app_name=settings.app_name, env=settings.env)

        check_production_config()

        db.initialize(settings.database_url)
        db.create_all_tables()
        logger.info("database_initialized")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("app_shutdown")

    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness probe; also reports whether the user directory answers."""
        return {"status": "ok", "database": "ok" if db.health_check() else "unavailable"}

    # Identity gate for everything except the auth routes
    protected_dependencies = [Depends(get_current_user)]

    app.include_router(auth_router.router, prefix=settings.api_prefix)
    app.include_router(
        user_router.router,
        prefix=settings.api_prefix,
        dependencies=protected_dependencies,
    )

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
