"""
hits_badge/api/middleware/request_id.py

Middleware:
- Inyecta/propaga X-Request-ID
- Log de acceso por request (duración + status + user/repo si la ruta los trae)
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from hits_badge.api.logging_config import configure_logging
from hits_badge.api.services import metrics
from hits_badge.api.settings import Settings

REQUEST_ID_HEADER = "X-Request-ID"

CallNext = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Request, CallNext], Awaitable[Response]]


def build_request_id_middleware(settings: Settings) -> Middleware:
    logger = configure_logging(settings)

    async def middleware(request: Request, call_next: CallNext) -> Response:
        start = time.monotonic()
        req_id = (request.headers.get("x-request-id") or "").strip() or uuid.uuid4().hex
        request.state.request_id = req_id

        metrics.inc("http_requests_total", 1)

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = req_id
            return response
        finally:
            extra = {
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status": status_code,
                "duration_ms": int((time.monotonic() - start) * 1000),
            }
            # path_params queda en el scope una vez resuelta la ruta
            for key in ("user", "repo"):
                value = request.path_params.get(key)
                if value:
                    extra[key] = value
            level = logging.WARNING if status_code >= 500 else logging.INFO
            logger.log(level, "request", extra=extra)

    return middleware
