"""Superficie HTTP de diagnóstico."""

from fastapi import FastAPI

from .. import __version__
from .health import router as health_router


def build_app(service) -> FastAPI:
    """Crea la app FastAPI ligada a un SyncService."""
    app = FastAPI(title="seren-sync", version=__version__)
    app.state.service = service
    app.include_router(health_router)
    return app


__all__ = ["build_app"]
