"""Request logging middleware: one timing line per HTTP request.

WebSocket traffic never reaches ``BaseHTTPMiddleware.dispatch``; the live
channel logs its own connects and disconnects.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from starlette.middleware.base import BaseHTTPMiddleware

if TYPE_CHECKING:
    from fastapi import Request, Response
    from starlette.middleware.base import RequestResponseEndpoint

logger = logging.getLogger(__name__)

_DEFAULT_QUIET_PATHS: list[str] = [
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and elapsed time of every request.

    Paths in ``quiet_paths`` are logged at DEBUG instead of INFO so health
    probes do not flood the log.

    Parameters
    ----------
    app:
        The ASGI application (injected by Starlette's middleware machinery).
    quiet_paths:
        URL prefixes logged at DEBUG level.
    timing_header:
        When ``True`` adds ``X-Response-Time-Ms`` to every response.
    """

    def __init__(
        self,
        app: Any,
        *,
        quiet_paths: list[str] | None = None,
        timing_header: bool = False,
    ) -> None:
        super().__init__(app)
        self.quiet_paths: list[str] = (
            quiet_paths if quiet_paths is not None else list(_DEFAULT_QUIET_PATHS)
        )
        self.timing_header = timing_header

    def _is_quiet(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.quiet_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.error(
                "%s %s failed after %.2f ms",
                request.method,
                request.url.path,
                elapsed_ms,
                exc_info=True,
            )
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        level = logging.DEBUG if self._is_quiet(request.url.path) else logging.INFO
        logger.log(
            level,
            "%s %s [%d] %.2f ms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        if self.timing_header:
            response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"
        return response


__all__ = ["RequestLoggingMiddleware"]
