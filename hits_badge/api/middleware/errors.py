# exception handlers (error_id)
from __future__ import annotations

import uuid
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from hits_badge.api.logging_config import configure_logging
from hits_badge.api.services import metrics
from hits_badge.api.settings import Settings

_BADGE_PREFIX = "/badge/"


def build_storage_error_handler(settings: Settings):
    """
    StorageError -> 500 {"error": "..."}.

    En /badge se añaden user/repo al payload; el resto de rutas devuelven solo
    el error (más request_id si existe).
    """
    logger = configure_logging(settings)

    async def handler(request: Request, exc: Exception) -> JSONResponse:
        req_id = getattr(request.state, "request_id", None)

        logger.warning(
            "storage_error",
            extra={"request_id": req_id, "path": request.url.path, "error": str(exc)},
        )
        metrics.inc("http_errors_5xx_total", 1)

        payload: dict[str, Any] = {}
        if request.url.path.startswith(_BADGE_PREFIX):
            payload["user"] = request.path_params.get("user")
            payload["repo"] = request.path_params.get("repo")
        payload["error"] = str(exc)
        if isinstance(req_id, str) and req_id:
            payload["request_id"] = req_id

        return JSONResponse(status_code=500, content=payload)

    return handler


def build_exception_handler(settings: Settings):
    logger = configure_logging(settings)

    async def handler(request: Request, exc: Exception) -> JSONResponse:
        error_id = uuid.uuid4().hex
        req_id = getattr(request.state, "request_id", None)

        logger.exception(
            "unhandled_exception",
            extra={"error_id": error_id, "request_id": req_id, "path": request.url.path},
        )
        metrics.inc("http_errors_5xx_total", 1)

        payload: dict[str, Any] = {"detail": "Internal Server Error", "error_id": error_id}
        if isinstance(req_id, str) and req_id:
            payload["request_id"] = req_id

        return JSONResponse(status_code=500, content=payload)

    return handler
