"""Ports for reading the upstream catalog."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from catalog_sync.domain.model import InventoryPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from decimal import Decimal

    from catalog_sync.domain.model import WeightUnit


class UpstreamError(RuntimeError):
    """Transport or authorisation failure talking to the upstream platform."""


@dataclass(frozen=True, slots=True)
class UpstreamVariant:
    """One variant as the upstream platform describes it. Prices are decimal amounts."""

    external_id: str
    name: str
    price: Decimal
    sku: str | None = None
    barcode: str | None = None
    compare_at_price: Decimal | None = None
    inventory_quantity: int = 0
    inventory_policy: InventoryPolicy = InventoryPolicy.DENY
    options: tuple[tuple[str, str], ...] = ()
    image_url: str | None = None
    weight: float | None = None
    weight_unit: WeightUnit | None = None
    requires_shipping: bool | None = None
    position: int = 1


@dataclass(frozen=True, slots=True)
class UpstreamProduct:
    """One product with all of its variants."""

    external_id: str
    name: str
    description: str | None = None
    image_url: str | None = None
    active: bool = True
    currency: str | None = None
    variants: tuple[UpstreamVariant, ...] = ()

    @property
    def has_variants(self) -> bool:
        return len(self.variants) > 1

    @property
    def in_stock(self) -> bool:
        return any(variant.inventory_quantity > 0 for variant in self.variants)


@dataclass(frozen=True, slots=True)
class CatalogPage:
    """A single page of the upstream product listing."""

    products: Sequence[UpstreamProduct]
    cursor: str | None = None


@runtime_checkable
class CatalogFetcher(Protocol):
    """Callable port yielding the upstream catalog page by page.

    Iteration is lazy; a transport failure surfaces as ``UpstreamError`` from the
    iterator at the page where it happened.
    """

    def __call__(self, *, page_size: int = 50) -> Iterable[CatalogPage]: ...


__all__ = [
    "CatalogFetcher",
    "CatalogPage",
    "UpstreamError",
    "UpstreamProduct",
    "UpstreamVariant",
]
