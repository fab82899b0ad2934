from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

import hits_badge.api.routers.convertors  # noqa: F401  registra el convertor "slug"
from hits_badge.api.deps import get_counter_store
from hits_badge.api.services.stats import (
    group_by_user,
    list_all_counts,
    list_repo_counts,
    repo_counts_payload,
)
from hits_badge.api.storage import CounterStore

router = APIRouter()


# Cada ruta se registra con y sin "/" final: evitamos el redirect 307 de Starlette.
@router.get("/stats/{user:slug}/{repo:slug}")
@router.get("/stats/{user:slug}/{repo:slug}/", include_in_schema=False)
def user_repo_stats(
    user: str,
    repo: str,
    store: CounterStore = Depends(get_counter_store),
) -> dict[str, Any]:
    return {user: {repo: store.get(user, repo)}}


@router.get("/stats/{user:slug}")
@router.get("/stats/{user:slug}/", include_in_schema=False)
def user_stats(user: str, store: CounterStore = Depends(get_counter_store)) -> dict[str, Any]:
    return repo_counts_payload(user, list_repo_counts(store, user))


@router.get("/stats")
@router.get("/stats/", include_in_schema=False)
def all_stats(store: CounterStore = Depends(get_counter_store)) -> dict[str, Any]:
    return group_by_user(list_all_counts(store))
