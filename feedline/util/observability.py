"""Logfire setup and instrumentation.

Services open spans named after the operation and attach the query shape:

    with logfire.span("activity_service.get", page=query.page):
        ...
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from feedline.config import Settings


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire once per process.

    Telemetry leaves the process only when ``send_to_logfire`` is set, or
    when it is unset and a token is present. Console output is always on.
    """
    observability = settings.observability
    send_to_logfire = observability.send_to_logfire
    if send_to_logfire is None:
        send_to_logfire = bool(observability.logfire_token)

    logfire.configure(
        service_name="feedline",
        service_version=settings.git_sha,
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=observability.logfire_token,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        cache_backend=settings.cache.backend,
    )


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every request, tagging spans with the route's path and method."""

    def _request_attributes(request, attributes):
        return {
            **attributes,
            "method": request.method,
            "path": request.url.path,
        }

    logfire.instrument_fastapi(app, request_attributes_mapper=_request_attributes)


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    logfire.instrument_sqlalchemy(engine=engine.sync_engine)
