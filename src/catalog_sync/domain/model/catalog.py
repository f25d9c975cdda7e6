"""Catalog records: products and their variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .entity import Entity, utcnow
from .enums import InventoryPolicy, ProductSource

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from .enums import WeightUnit


@dataclass(eq=False, kw_only=True)
class Product(Entity):
    """A catalog entry owned by a business.

    Synced products carry an ``external_product_id`` that is unique per business.
    ``price``/``currency`` hold the direct price of simple products and mirror the
    first variant's price for variant-bearing ones. Prices are minor units.
    """

    business_id: UUID
    name: str
    description: str | None = None
    image_url: str | None = None
    has_variants: bool = False
    price: int | None = None
    currency: str | None = None
    source: ProductSource = ProductSource.MANUAL
    external_product_id: str | None = None
    order: int = 0
    available: bool = True
    deleted: bool = False
    last_sync_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_synced(self) -> bool:
        return self.source == ProductSource.SYNCED

    def mark_unavailable(self, *, now: datetime) -> None:
        self.available = False
        self.last_sync_at = now
        self.updated_at = now

    def detach(self, *, now: datetime) -> None:
        """Hand the product over to the business; catalog values stay as last synced."""

        self.source = ProductSource.MANUAL
        self.external_product_id = None
        self.last_sync_at = None
        self.updated_at = now


@dataclass(eq=False, kw_only=True)
class Variant(Entity):
    """A purchasable option of a variant-bearing product.

    ``external_variant_id`` is unique across the whole store because the upstream
    platform assigns it globally.
    """

    product_id: UUID
    name: str
    price: int
    sku: str | None = None
    barcode: str | None = None
    compare_at_price: int | None = None
    inventory_quantity: int = 0
    inventory_policy: InventoryPolicy = InventoryPolicy.DENY
    track_inventory: bool = True
    option1_name: str | None = None
    option1_value: str | None = None
    option2_name: str | None = None
    option2_value: str | None = None
    option3_name: str | None = None
    option3_value: str | None = None
    image_url: str | None = None
    weight: float | None = None
    weight_unit: WeightUnit | None = None
    requires_shipping: bool | None = None
    position: int = 1
    external_variant_id: str | None = None
    available: bool = True
    last_sync_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def options(self) -> tuple[tuple[str | None, str | None], ...]:
        return (
            (self.option1_name, self.option1_value),
            (self.option2_name, self.option2_value),
            (self.option3_name, self.option3_value),
        )

    def mark_unavailable(self, *, now: datetime) -> None:
        self.available = False
        self.last_sync_at = now
        self.updated_at = now

    def detach(self, *, now: datetime) -> None:
        self.external_variant_id = None
        self.last_sync_at = None
        self.updated_at = now
