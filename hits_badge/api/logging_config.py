# logger, formatter con contexto de request y handler opcional a fichero
from __future__ import annotations

import logging
from pathlib import Path

from hits_badge.api.settings import Settings

LOGGER_NAME = "hits_badge"

_HANDLER_TAG = "_hits_badge_handler"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# extras que ponen request_id.py, errors.py y counter_store.py
CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "status",
    "duration_ms",
    "user",
    "repo",
    "op",
    "error_id",
    "error",
    "db_path",
)


class ContextFormatter(logging.Formatter):
    """
    Formato clásico + los `extra` conocidos como key=value al final.

    `logger.info("request", extra={"user": "octo"})` ->
    `... hits_badge: request user=octo`
    """

    def __init__(self) -> None:
        super().__init__(_FORMAT)

    def formatMessage(self, record: logging.LogRecord) -> str:
        base = super().formatMessage(record)
        pairs = [
            f"{name}={getattr(record, name)}"
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        ]
        return f"{base} {' '.join(pairs)}" if pairs else base


def _our_handler(root: logging.Logger) -> logging.Handler | None:
    for handler in root.handlers:
        if getattr(handler, _HANDLER_TAG, False):
            return handler
    return None


def _build_handler(settings: Settings, root: logging.Logger) -> logging.Handler | None:
    """
    - log_file definido: FileHandler (crea el directorio).
    - sin fichero: StreamHandler solo si nadie configuró el root (uvicorn/pytest sí lo hacen).
    """
    if settings.log_file:
        path = Path(settings.log_file).expanduser().resolve()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            logging.getLogger(LOGGER_NAME).warning("cannot create log dir %s", path.parent)
            return None
        return logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    if not root.handlers:
        return logging.StreamHandler()
    return None


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Ajusta el nivel global y engancha (una sola vez) nuestro handler con ContextFormatter.
    Llamadas repetidas solo actualizan el nivel.
    """
    root = logging.getLogger()
    root.setLevel(settings.log_level)

    handler = _our_handler(root)
    if handler is None:
        handler = _build_handler(settings, root)
        if handler is not None:
            handler.setFormatter(ContextFormatter())
            setattr(handler, _HANDLER_TAG, True)
            root.addHandler(handler)
    if handler is not None:
        handler.setLevel(settings.log_level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level)
    return logger
