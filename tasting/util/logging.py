"""Standard library logging setup.

Application code logs through logfire. This module covers records emitted
through ``logging`` by the libraries underneath (SQLAlchemy, Alembic,
aiosqlite) and by scripts.
"""

import logging
import sys

import logfire

from tasting.config import Settings

# Libraries that are noisy at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def log_level(settings: Settings) -> int:
    if settings.debug:
        return logging.DEBUG
    if settings.environment == "test":
        return logging.WARNING
    return logging.INFO


def setup_logging(settings: Settings, forward_to_logfire: bool = False) -> None:
    """Configure the root logger.

    Args:
        settings: Application settings
        forward_to_logfire: Also hand every record to logfire, so library
            warnings land next to the spans they happened in
    """
    level = log_level(settings)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if forward_to_logfire:
        handlers.append(logfire.LogfireLoggingHandler())

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    logging.getLogger("tasting").setLevel(level)

    get_logger(__name__).info(
        "Logging configured: environment=%s, level=%s",
        settings.environment,
        logging.getLevelName(level),
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``tasting`` hierarchy.

    Args:
        name: Logger name (typically __name__)
    """
    if name != "tasting" and not name.startswith("tasting."):
        name = f"tasting.{name}"
    return logging.getLogger(name)
