"""
FastAPI application entrypoint for the Epic account bridge.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application.

    Fails with ``pydantic.ValidationError`` when the Epic client id or redirect
    URI are not configured.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Skinchecker Bridge",
        version="0.1.0",
        description="Links Discord users to Epic accounts and reports likely owned cosmetics.",
    )
    app.include_router(api_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
