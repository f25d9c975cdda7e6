"""Tests for SQLAlchemy repositories."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session  # noqa: TC002

from catalog_sync.adapters.sqlalchemy.repositories import (
    SqlAlchemyConnectionRepository,
    SqlAlchemyProductRepository,
    SqlAlchemyVariantRepository,
)
from catalog_sync.domain.model import (
    InventoryPolicy,
    Product,
    ProductSource,
    Variant,
    WeightUnit,
)
from tests.helpers.catalog import make_connection

if TYPE_CHECKING:
    import uuid

SYNCED_AT = datetime(2025, 2, 1, 9, 30, tzinfo=UTC)


def _synced(business_id: uuid.UUID, external_id: str, *, order: int, available: bool = True) -> Product:
    return Product(
        business_id=business_id,
        name=f"Product {external_id}",
        source=ProductSource.SYNCED,
        external_product_id=external_id,
        order=order,
        available=available,
        last_sync_at=SYNCED_AT,
    )


def test_connection_repository_lookups(sqlite_session: Session, business_id: uuid.UUID) -> None:
    repository = SqlAlchemyConnectionRepository(sqlite_session)
    repository.add(make_connection(business_id, shop="candles.myshopify.com"))
    sqlite_session.commit()

    assert repository.get_by_business(business_id) is not None
    found = repository.get_by_shop("candles.myshopify.com")
    assert found is not None
    assert found.business_id == business_id
    assert repository.get_by_shop("other.myshopify.com") is None

    repository.remove(found)
    sqlite_session.commit()
    assert repository.get_by_business(business_id) is None


def test_get_by_shop_prefers_the_earliest_connection(sqlite_session: Session) -> None:
    repository = SqlAlchemyConnectionRepository(sqlite_session)
    later = make_connection(uuid4(), shop="shared.myshopify.com")
    later.created_at = datetime(2025, 3, 1, tzinfo=UTC)
    earlier = make_connection(uuid4(), shop="shared.myshopify.com")
    earlier.created_at = datetime(2025, 1, 1, tzinfo=UTC)
    repository.add(later)
    repository.add(earlier)
    sqlite_session.commit()

    for _ in range(3):
        found = repository.get_by_shop("shared.myshopify.com")
        assert found is not None
        assert found.business_id == earlier.business_id


def test_product_repository_filters_synced_rows(
    sqlite_session: Session, business_id: uuid.UUID
) -> None:
    repository = SqlAlchemyProductRepository(sqlite_session)
    manual = Product(business_id=business_id, name="Hand made", order=2)
    live = _synced(business_id, "gid://shopify/Product/1", order=0)
    gone = _synced(business_id, "gid://shopify/Product/2", order=1, available=False)
    for product in (manual, live, gone):
        repository.add(product)
    sqlite_session.commit()

    assert repository.get_by_external_id(business_id, "gid://shopify/Product/1") is live
    assert repository.get_by_external_id(business_id, "gid://shopify/Product/9") is None
    assert list(repository.list_for_business(business_id)) == [live, gone, manual]
    assert set(repository.list_synced(business_id)) == {live, gone}
    assert list(repository.list_synced(business_id, available_only=True)) == [live]


def test_product_external_identity_is_unique_per_business(
    sqlite_session: Session, business_id: uuid.UUID
) -> None:
    repository = SqlAlchemyProductRepository(sqlite_session)
    repository.add(_synced(business_id, "gid://shopify/Product/1", order=0))
    repository.add(_synced(business_id, "gid://shopify/Product/1", order=1))

    with pytest.raises(IntegrityError):
        sqlite_session.commit()


def test_enums_are_stored_by_name(sqlite_session: Session, business_id: uuid.UUID) -> None:
    repository = SqlAlchemyProductRepository(sqlite_session)
    repository.add(_synced(business_id, "gid://shopify/Product/1", order=0))
    sqlite_session.commit()

    stored = sqlite_session.execute(text("SELECT source, display_order FROM product")).one()

    assert tuple(stored) == ("SYNCED", 0)


def test_variant_repository_round_trips_catalog_fields(
    sqlite_session: Session, business_id: uuid.UUID
) -> None:
    products = SqlAlchemyProductRepository(sqlite_session)
    variants = SqlAlchemyVariantRepository(sqlite_session)
    product = _synced(business_id, "gid://shopify/Product/1", order=0)
    products.add(product)
    sqlite_session.flush()
    second = Variant(
        product_id=product.id,
        name="Blue / M",
        price=4990,
        inventory_policy=InventoryPolicy.CONTINUE,
        option1_name="Color",
        option1_value="Blue",
        weight=0.3,
        weight_unit=WeightUnit.KILOGRAMS,
        position=2,
        external_variant_id="gid://shopify/ProductVariant/2",
    )
    first = Variant(
        product_id=product.id,
        name="White / M",
        price=4990,
        position=1,
        external_variant_id="gid://shopify/ProductVariant/1",
        available=False,
    )
    variants.add(second)
    variants.add(first)
    sqlite_session.commit()
    sqlite_session.expire_all()

    assert list(variants.list_for_product(product.id)) == [first, second]
    reloaded = variants.get_by_external_id("gid://shopify/ProductVariant/2")
    assert reloaded is second
    assert reloaded.inventory_policy is InventoryPolicy.CONTINUE
    assert reloaded.weight_unit is WeightUnit.KILOGRAMS
    assert reloaded.options[0] == ("Color", "Blue")
    assert list(variants.list_synced_for_business(business_id, available_only=True)) == [second]


def test_variant_listing_is_scoped_to_business(
    sqlite_session: Session, business_id: uuid.UUID
) -> None:
    products = SqlAlchemyProductRepository(sqlite_session)
    variants = SqlAlchemyVariantRepository(sqlite_session)
    other_business = uuid4()
    mine = _synced(business_id, "gid://shopify/Product/1", order=0)
    theirs = _synced(other_business, "gid://shopify/Product/2", order=0)
    products.add(mine)
    products.add(theirs)
    sqlite_session.flush()
    variants.add(Variant(product_id=mine.id, name="A", price=1, external_variant_id="v-a"))
    variants.add(Variant(product_id=theirs.id, name="B", price=1, external_variant_id="v-b"))
    sqlite_session.commit()

    listed = variants.list_synced_for_business(business_id)

    assert [variant.external_variant_id for variant in listed] == ["v-a"]
