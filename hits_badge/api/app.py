from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from hits_badge import __version__
from hits_badge.api.deps import get_settings
from hits_badge.api.middleware import (
    build_exception_handler,
    build_request_id_middleware,
    build_storage_error_handler,
)
from hits_badge.api.routers.badge import router as badge_router
from hits_badge.api.routers.health import router as health_router
from hits_badge.api.routers.stats import router as stats_router
from hits_badge.api.settings import Settings
from hits_badge.api.storage import CounterStore, StorageError


def create_app(settings: Settings | None = None, store: CounterStore | None = None) -> FastAPI:
    """
    Construye la app con un único CounterStore compartido.

    - Sin `store`: se crea uno sobre `settings.db_path` y se inicializa aquí;
      si falla, StorageUnavailable sale de create_app (arranque abortado).
    - Con `store` (tests): se usa tal cual y no se cierra al apagar.
    """
    settings = settings or get_settings()
    owns_store = store is None
    if store is None:
        store = CounterStore(settings.db_path, busy_timeout_s=settings.db_busy_timeout_s)
        store.initialize()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            if owns_store:
                app.state.counter_store.close()

    app = FastAPI(title="Hits Badge API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.counter_store = store

    app.add_middleware(GZipMiddleware, minimum_size=max(0, settings.gzip_min_size))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.middleware("http")(build_request_id_middleware(settings))
    app.add_exception_handler(StorageError, build_storage_error_handler(settings))
    app.add_exception_handler(Exception, build_exception_handler(settings))

    app.include_router(health_router)
    app.include_router(badge_router)
    app.include_router(stats_router)

    return app
