"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import CatalogFetcher, CatalogPage, UpstreamError, UpstreamProduct, UpstreamVariant
from .persistence import (
    ConnectionRepository,
    ProductRepository,
    Repository,
    VariantRepository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    CatalogUnitOfWorkFactory,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogFetcher",
    "CatalogPage",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "CatalogUnitOfWorkFactory",
    "ConnectionRepository",
    "ProductRepository",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "UpstreamError",
    "UpstreamProduct",
    "UpstreamVariant",
    "VariantRepository",
]
