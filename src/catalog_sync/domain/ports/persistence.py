"""Ports for persisting catalog records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from catalog_sync.domain.model import Connection, Product, Variant

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent record store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ConnectionRepository(Repository[Connection], Protocol):
    """Persistence contract for upstream connections."""

    def get_by_business(self, business_id: UUID) -> Connection | None: ...

    def get_by_shop(self, shop: str) -> Connection | None:
        """Earliest connection for ``shop``; several businesses may link one shop."""
        ...

    def remove(self, entity: Connection) -> None: ...


@runtime_checkable
class ProductRepository(Repository[Product], Protocol):
    """Persistence contract for products."""

    def get_by_external_id(self, business_id: UUID, external_product_id: str) -> Product | None: ...

    def list_for_business(self, business_id: UUID) -> Sequence[Product]: ...

    def list_synced(self, business_id: UUID, *, available_only: bool = False) -> Sequence[Product]: ...


@runtime_checkable
class VariantRepository(Repository[Variant], Protocol):
    """Persistence contract for variants."""

    def get_by_external_id(self, external_variant_id: str) -> Variant | None: ...

    def list_for_product(self, product_id: UUID) -> Sequence[Variant]: ...

    def list_synced_for_business(
        self, business_id: UUID, *, available_only: bool = False
    ) -> Sequence[Variant]: ...
