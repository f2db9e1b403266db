from __future__ import annotations

import logging

from metis.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured_level: int | None = None


def configure_logging(level: str | None = None) -> int:
    """Configure root logging once per process and return the active level.

    ``level`` overrides ``LOG_LEVEL``; a later call with a different level
    only adjusts the root logger.
    """
    global _configured_level
    name = (level or get_settings().log_level).upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    if _configured_level is None:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
        # SQL echo only at debug
        logging.getLogger("sqlalchemy.engine").setLevel(
            logging.INFO if resolved <= logging.DEBUG else logging.WARNING
        )
    elif resolved != _configured_level:
        logging.getLogger().setLevel(resolved)

    _configured_level = resolved
    return resolved
