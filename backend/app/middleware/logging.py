"""
NotaryPro Backend — Access Log Middleware
===========================================

What:  One log line per HTTP request on the `notarypro.access` logger.
How:   Level follows the status class: 5xx → ERROR, 4xx → WARNING,
       otherwise INFO. A request whose handler raised is logged as 500
       before the exception continues to the error handlers. /health is
       not logged.

Never logged: request bodies (passwords, RUTs, document content) and the
Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("notarypro.access")

QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _log_request(request: Request, status: int, started: float) -> None:
    duration_ms = (time.perf_counter() - started) * 1000
    client_ip = request.client.host if request.client else "unknown"
    rid = request_id_var.get("")
    user_agent = request.headers.get("user-agent", "-")

    logger.log(
        level_for_status(status),
        "%s %s %d %.1fms [%s] from %s",
        request.method,
        request.url.path,
        status,
        duration_ms,
        rid,
        client_ip,
        extra={
            "request_id": rid,
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
            "client_ip": client_ip,
            "user_agent": user_agent[:200],
        },
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            _log_request(request, 500, started)
            raise

        _log_request(request, response.status_code, started)
        return response
