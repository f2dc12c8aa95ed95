#!/usr/bin/env python3
"""Serve the activity API with uvicorn, reporting startup failures to Logfire."""

import sys

import logfire
import uvicorn

from feedline.config import Settings
from feedline.util.logging import setup_logging
from feedline.util.observability import configure_logfire


def main() -> int:
    settings = Settings()

    configure_logfire(settings)
    setup_logging(settings)

    try:
        logfire.info(
            "Starting activity API",
            host=settings.api.host,
            port=settings.api.port,
            cache_backend=settings.cache.backend,
        )
        uvicorn.run(
            "feedline.interface.api.app:create_app",
            factory=True,
            host=settings.api.host,
            port=settings.api.port,
            workers=settings.api.workers,
            log_level="debug" if settings.debug else "info",
        )
        return 0
    except Exception as e:
        logfire.error(
            "Activity API failed to start",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise


if __name__ == "__main__":
    sys.exit(main())
