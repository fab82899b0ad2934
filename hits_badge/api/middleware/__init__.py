from __future__ import annotations

from hits_badge.api.middleware.errors import build_exception_handler, build_storage_error_handler
from hits_badge.api.middleware.request_id import build_request_id_middleware

__all__ = ["build_exception_handler", "build_storage_error_handler", "build_request_id_middleware"]
