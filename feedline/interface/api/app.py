"""FastAPI application."""

from typing import Optional

from dishka import AsyncContainer
from fastapi import FastAPI

from feedline.interface.api.routes import activities, health
from feedline.util.di.container import create_container, setup_di
from feedline.util.observability import instrument_fastapi


def create_app(container: Optional[AsyncContainer] = None) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.

    Args:
        container: DI container to use; the production container by default

    Returns:
        Configured application
    """
    app_instance = FastAPI(
        title="Feedline API",
        description="Activity streams with threaded comments",
        version="0.1.0",
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    instrument_fastapi(app_instance)

    setup_di(app_instance, container or create_container())

    app_instance.include_router(health.router)
    app_instance.include_router(activities.router)

    return app_instance
