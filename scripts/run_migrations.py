#!/usr/bin/env python3
"""Upgrade the comments schema.

Usage:
    python scripts/run_migrations.py            # upgrade to head
    python scripts/run_migrations.py 8d2f61b0c4a7
    python scripts/run_migrations.py head --sql # print SQL, touch nothing
"""

import argparse
import sys

import logfire
from alembic import command
from alembic.config import Config

from tasting.config import Settings
from tasting.util.logging import get_logger, setup_logging
from tasting.util.observability import configure_logfire

logger = get_logger("scripts.run_migrations")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("revision", nargs="?", default="head")
    parser.add_argument(
        "--sql", action="store_true", help="Emit SQL instead of running it"
    )
    parser.add_argument("--config", default="alembic.ini")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run migrations, reporting failures to Logfire before re-raising."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = Settings()

    configure_logfire(settings)
    setup_logging(settings, forward_to_logfire=True)

    with logfire.span(
        "run_migrations",
        revision=args.revision,
        offline=args.sql,
        environment=settings.environment,
    ):
        try:
            command.upgrade(Config(args.config), args.revision, sql=args.sql)
        except Exception as e:
            logfire.error(
                "Database migration failed",
                revision=args.revision,
                error=str(e),
                error_type=type(e).__name__,
                _exc_info=sys.exc_info(),
            )
            raise

    logger.info("Schema at %s", args.revision)
    return 0


if __name__ == "__main__":
    sys.exit(main())
