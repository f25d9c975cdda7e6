"""SQLAlchemy adapter package for the catalog."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyConnectionRepository,
    SqlAlchemyProductRepository,
    SqlAlchemyVariantRepository,
)
from .unit_of_work import SqlAlchemyCatalogUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyConnectionRepository",
    "SqlAlchemyProductRepository",
    "SqlAlchemyVariantRepository",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
