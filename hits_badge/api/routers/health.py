from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from hits_badge.api.deps import get_counter_store
from hits_badge.api.services import metrics
from hits_badge.api.storage import CounterStore

router = APIRouter()


@router.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
def ready(store: CounterStore = Depends(get_counter_store)) -> dict[str, Any]:
    """
    Readiness:
    - la conexión SQLite responde a un SELECT 1.
    """
    if not store.ping():
        raise HTTPException(
            status_code=503,
            detail={"ready": False, "issues": {"counter_store": f"unreachable: {store.db_path}"}},
        )
    return {"ready": True, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/metrics")
def metrics_endpoint() -> Response:
    body = metrics.render_prometheus()
    return Response(content=body, media_type="text/plain; version=0.0.4")
