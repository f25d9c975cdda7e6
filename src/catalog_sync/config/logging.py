"""Root logger setup for the command line entry points."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# httpx logs every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore")


def _level_from_env() -> int:
    name = (optional_env_var("CATALOG_SYNC_LOG_LEVEL", "INFO") or "INFO").upper()
    levels = logging.getLevelNamesMapping()
    if name not in levels:
        raise ConfigurationError(f"Unknown log level in CATALOG_SYNC_LOG_LEVEL: {name}")
    return levels[name]


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Install a terse stderr handler on the root logger.

    ``level`` overrides ``CATALOG_SYNC_LOG_LEVEL``. ``force=True`` replaces handlers
    installed by an earlier call.
    """

    effective = level if level is not None else _level_from_env()
    logging.basicConfig(level=effective, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(effective, logging.WARNING))
