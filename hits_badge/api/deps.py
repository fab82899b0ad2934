from __future__ import annotations

from fastapi import Request

from hits_badge.api.settings import Settings
from hits_badge.api.storage import CounterStore, StorageUnavailable

_SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return _SETTINGS


def get_counter_store(request: Request) -> CounterStore:
    # handle único creado en create_app(); compartido por todas las requests
    store = getattr(request.app.state, "counter_store", None)
    if store is None:
        raise StorageUnavailable("counter store is not configured")
    return store
