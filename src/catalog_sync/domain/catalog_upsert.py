"""Idempotent writes of upstream products and variants into the local catalog.

Every function here operates on an open repository collection and leaves the
commit to the caller, so a product and its variants land in one unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from catalog_sync.domain.errors import CatalogValidationError
from catalog_sync.domain.model import Product, ProductSource, Variant

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from catalog_sync.domain.ports import (
        CatalogRepositories,
        ProductRepository,
        UpstreamProduct,
        UpstreamVariant,
    )

MAX_VARIANT_OPTIONS = 3


@dataclass(frozen=True, slots=True)
class UpsertResult[TRecord]:
    """The written record and whether it was inserted."""

    record: TRecord
    is_new: bool


def to_minor_units(amount: Decimal) -> int:
    """Convert a decimal amount to integer cents, rounding half up."""

    return int((amount * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def next_display_order(products: ProductRepository, business_id: UUID) -> int:
    # linear in the size of the catalog
    return max((product.order for product in products.list_for_business(business_id)), default=-1) + 1


def upsert_product(
    repositories: CatalogRepositories,
    *,
    business_id: UUID,
    upstream: UpstreamProduct,
    now: datetime,
    fallback_currency: str | None = None,
) -> UpsertResult[Product]:
    """Insert or patch the synced product keyed by ``(business_id, external id)``.

    Only catalog fields are patched. ``order`` and ``deleted`` belong to the
    business and are set once, on insert. The upstream currency wins when it is
    known; ``fallback_currency`` applies to inserts without one.
    """

    _validate_product(upstream)
    products = repositories.products
    existing = products.get_by_external_id(business_id, upstream.external_id)
    if existing is not None:
        _apply_product_fields(existing, upstream, now=now)
        return UpsertResult(record=existing, is_new=False)

    product = Product(
        business_id=business_id,
        name=upstream.name,
        currency=upstream.currency or fallback_currency,
        source=ProductSource.SYNCED,
        external_product_id=upstream.external_id,
        order=next_display_order(products, business_id),
        deleted=False,
        created_at=now,
    )
    _apply_product_fields(product, upstream, now=now)
    products.add(product)
    return UpsertResult(record=product, is_new=True)


def upsert_variant(
    repositories: CatalogRepositories,
    *,
    product_id: UUID,
    upstream: UpstreamVariant,
    now: datetime,
) -> UpsertResult[Variant]:
    """Insert or patch the variant keyed by its globally unique external id."""

    _validate_variant(upstream)
    variants = repositories.variants
    existing = variants.get_by_external_id(upstream.external_id)
    if existing is not None:
        _apply_variant_fields(existing, upstream, now=now)
        return UpsertResult(record=existing, is_new=False)

    variant = Variant(
        product_id=product_id,
        name=upstream.name,
        price=to_minor_units(upstream.price),
        track_inventory=True,
        external_variant_id=upstream.external_id,
        created_at=now,
    )
    _apply_variant_fields(variant, upstream, now=now)
    variants.add(variant)
    return UpsertResult(record=variant, is_new=True)


def mark_product_removed(
    repositories: CatalogRepositories,
    *,
    business_id: UUID,
    external_product_id: str,
    now: datetime,
) -> int:
    """Mark one synced product and all of its variants unavailable.

    Returns the number of rows touched; zero when the product was never synced.
    """

    product = repositories.products.get_by_external_id(business_id, external_product_id)
    if product is None:
        return 0
    product.mark_unavailable(now=now)
    touched = 1
    for variant in repositories.variants.list_for_product(product.id):
        variant.mark_unavailable(now=now)
        touched += 1
    return touched


def mark_variant_removed(
    repositories: CatalogRepositories,
    *,
    external_variant_id: str,
    now: datetime,
) -> int:
    variant = repositories.variants.get_by_external_id(external_variant_id)
    if variant is None:
        return 0
    variant.mark_unavailable(now=now)
    return 1


def _validate_product(upstream: UpstreamProduct) -> None:
    if not upstream.external_id.strip():
        raise CatalogValidationError("Upstream product has no external id")
    if not upstream.name.strip():
        raise CatalogValidationError(f"Product {upstream.external_id} has no name")


def _validate_variant(upstream: UpstreamVariant) -> None:
    if not upstream.external_id.strip():
        raise CatalogValidationError(f"Variant {upstream.name!r} has no external id")
    if upstream.price < 0:
        raise CatalogValidationError(f"Variant {upstream.external_id} has a negative price")
    if upstream.compare_at_price is not None and upstream.compare_at_price < 0:
        raise CatalogValidationError(
            f"Variant {upstream.external_id} has a negative compare-at price"
        )
    if len(upstream.options) > MAX_VARIANT_OPTIONS:
        raise CatalogValidationError(
            f"Variant {upstream.external_id} has more than {MAX_VARIANT_OPTIONS} options"
        )


def _apply_product_fields(product: Product, upstream: UpstreamProduct, *, now: datetime) -> None:
    product.name = upstream.name
    product.description = upstream.description
    product.image_url = upstream.image_url
    product.has_variants = upstream.has_variants
    if upstream.currency:
        product.currency = upstream.currency
    if upstream.variants:
        product.price = to_minor_units(upstream.variants[0].price)
        product.available = upstream.in_stock
    product.last_sync_at = now
    product.updated_at = now


def _apply_variant_fields(variant: Variant, upstream: UpstreamVariant, *, now: datetime) -> None:
    variant.name = upstream.name
    variant.sku = upstream.sku
    variant.barcode = upstream.barcode
    variant.price = to_minor_units(upstream.price)
    variant.compare_at_price = (
        to_minor_units(upstream.compare_at_price)
        if upstream.compare_at_price is not None
        else None
    )
    variant.inventory_quantity = upstream.inventory_quantity
    variant.inventory_policy = upstream.inventory_policy
    options = list(upstream.options) + [(None, None)] * (MAX_VARIANT_OPTIONS - len(upstream.options))
    (variant.option1_name, variant.option1_value) = options[0]
    (variant.option2_name, variant.option2_value) = options[1]
    (variant.option3_name, variant.option3_value) = options[2]
    variant.image_url = upstream.image_url
    variant.weight = upstream.weight
    variant.weight_unit = upstream.weight_unit
    variant.requires_shipping = upstream.requires_shipping
    variant.position = upstream.position
    variant.available = upstream.inventory_quantity > 0
    variant.last_sync_at = now
    variant.updated_at = now
