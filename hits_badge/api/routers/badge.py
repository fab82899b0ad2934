from __future__ import annotations

from fastapi import APIRouter, Depends, Response

import hits_badge.api.routers.convertors  # noqa: F401  registra el convertor "slug"
from hits_badge.api.deps import get_counter_store
from hits_badge.api.services import metrics
from hits_badge.api.services.badge import NO_CACHE_HEADERS, SVG_MEDIA_TYPE, render_badge
from hits_badge.api.storage import CounterStore

router = APIRouter()


@router.get("/badge/{user:slug}/{repo:slug}.svg", response_class=Response)
def badge(user: str, repo: str, store: CounterStore = Depends(get_counter_store)) -> Response:
    # Los errores de storage los traduce el exception handler (500 JSON con user/repo).
    count = store.increment_and_get(user, repo)
    metrics.inc("badge_served_total", 1)
    return Response(content=render_badge(count), media_type=SVG_MEDIA_TYPE, headers=NO_CACHE_HEADERS)
