"""Transaction boundary the catalog workflows run inside."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from catalog_sync.domain.ports.persistence import (
        ConnectionRepository,
        ProductRepository,
        VariantRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Repositories that share one transaction."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """A ``with`` block is one transaction; nothing persists without ``commit()``."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class CatalogRepositories(RepositoryCollection):
    connections: ConnectionRepository
    products: ProductRepository
    variants: VariantRepository


type CatalogUnitOfWork = UnitOfWork[CatalogRepositories]
type CatalogUnitOfWorkFactory = Callable[[], CatalogUnitOfWork]
