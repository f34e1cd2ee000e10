"""
Structured logging for the Dashgate API and session client.

Events are snake_case names with keyword fields:
    logger = get_logger("auth")
    logger.info("sso_login_success", user_id=user.id)

Development (ENV=development or DEBUG) renders readable console lines; every
other environment emits one JSON object per event.
"""

import logging
import os
import sys
import time
import uuid
from collections.abc import MutableMapping
from functools import lru_cache
from typing import Any

import structlog
from structlog.types import Processor

APP_NAME = "dashgate"
REQUEST_ID_HEADER = b"x-request-id"


def _use_console_renderer() -> bool:
    from .config import get_settings

    return get_settings().debug or os.getenv("ENV", "development") == "development"


def _tag_app(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def get_processors() -> list[Processor]:
    """Processor chain for the current environment."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _tag_app,
    ]
    if _use_console_renderer():
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return processors


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """Route structlog through stdlib logging on stdout. Safe to call repeatedly."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    structlog.configure(
        processors=get_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = APP_NAME) -> structlog.stdlib.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)


def bind_context(**fields: Any) -> None:
    """Attach fields to every event logged from the current context."""
    structlog.contextvars.bind_contextvars(**fields)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class RequestLoggingMiddleware:
    """
    ASGI middleware: one request ID per request, bound into the log context
    and echoed in the ``X-Request-ID`` response header, plus a start and a
    completion event per request.
    """

    def __init__(self, app):
        self.app = app
        self.logger = _LazyLogger("http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        request_id = headers.get(REQUEST_ID_HEADER, b"").decode() or uuid.uuid4().hex[:8]
        method, path = scope.get("method", ""), scope.get("path", "")

        bind_context(request_id=request_id)
        self.logger.info("request_started", method=method, path=path)
        started = time.perf_counter()
        status_code = 500

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                message["headers"] = [*message.get("headers", []), (REQUEST_ID_HEADER, request_id.encode())]
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            if status_code >= 500:
                log = self.logger.error
            elif status_code >= 400:
                log = self.logger.warning
            else:
                log = self.logger.info
            log(
                "request_complete",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            clear_context()


class _LazyLogger:
    """Module-level logger that resolves on first use, after configuration."""

    def __init__(self, name: str):
        self._name = name
        self._logger: structlog.stdlib.BoundLogger | None = None

    def __getattr__(self, attr: str):
        if self._logger is None:
            self._logger = get_logger(self._name)
        return getattr(self._logger, attr)


oauth_logger = _LazyLogger("oauth")
client_logger = _LazyLogger("client")


__all__ = [
    "RequestLoggingMiddleware",
    "bind_context",
    "clear_context",
    "client_logger",
    "configure_logging",
    "get_logger",
    "oauth_logger",
]
