#!/usr/bin/env python3
"""Run database migrations with Logfire error tracking.

Usage:
    python scripts/run_migrations.py [revision]

The revision defaults to ``head``.
"""

import sys
import logfire
from alembic import command
from alembic.config import Config

from feedline.config import Settings
from feedline.util.logging import setup_logging
from feedline.util.observability import configure_logfire


def main(argv: list[str]) -> int:
    """Upgrade the schema and log any errors to Logfire."""
    settings = Settings()
    configure_logfire(settings)
    setup_logging(settings)

    revision = argv[1] if len(argv) > 1 else "head"

    try:
        logfire.info("Upgrading activity schema", revision=revision)
        command.upgrade(Config("alembic.ini"), revision)
        logfire.info("Activity schema upgraded", revision=revision)
        return 0

    except Exception as e:
        logfire.error(
            "Database migration failed",
            error=str(e),
            error_type=type(e).__name__,
            revision=revision,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the container fails and doesn't start with broken schema
        raise


if __name__ == "__main__":
    sys.exit(main(sys.argv))
