"""Health and readiness endpoints."""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Liveness probe: always returns ok if process is running."""
    return {"status": "ok"}


@router.get("/ready")
def ready(request: Request):
    """Readiness probe: service started, subscribed and at least one socket connected."""
    check = request.app.state.service.health_check()
    if not check["healthy"]:
        raise HTTPException(status_code=503, detail=check)
    return {"status": "ready", **check}


@router.get("/stats")
def stats(request: Request):
    """Estadísticas del router y de cada conexión."""
    return request.app.state.service.stats


@router.get("/metrics")
def metrics():
    """Prometheus text exposition."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
