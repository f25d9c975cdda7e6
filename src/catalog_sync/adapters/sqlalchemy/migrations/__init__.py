"""Alembic entry points for the catalog schema.

The revision scripts ship inside the package, so upgrades work from an installed
wheel as well as from a checkout. ``[tool.alembic]`` in ``pyproject.toml`` points
the ``alembic`` command line at the same directory for authoring revisions.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from catalog_sync.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

SCRIPT_LOCATION: Final[Path] = Path(__file__).resolve().parent
HEAD: Final[str] = "head"


def alembic_config(*, database_uri: str | None = None) -> Config:
    config = Config()
    config.set_main_option("script_location", str(SCRIPT_LOCATION))
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema up to the newest revision.

    With ``engine`` the upgrade runs on one of its connections inside a single
    transaction; otherwise Alembic opens its own engine for ``database_uri``.
    """

    if engine is None:
        config = alembic_config(database_uri=database_uri or get_database_config().uri)
        command.upgrade(config, HEAD)
        return

    config = alembic_config()
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, HEAD)
