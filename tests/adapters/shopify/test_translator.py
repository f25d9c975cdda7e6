from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from catalog_sync.adapters.shopify.schema import ProductsQueryResponse, WebhookProduct
from catalog_sync.adapters.shopify.translator import (
    parse_inventory_policy,
    parse_webhook,
    parse_weight_unit,
    product_gid,
    translate_product_node,
    translate_webhook_product,
    variant_display_name,
)
from catalog_sync.domain.errors import CatalogValidationError
from catalog_sync.domain.model import EventEntity, EventKind, InventoryPolicy, WeightUnit

if TYPE_CHECKING:
    from tests.helpers.shopify import ShopifyPayload


def _nodes(page: ShopifyPayload) -> ProductsQueryResponse:
    return ProductsQueryResponse.model_validate(page)


def test_translate_product_node_maps_variants(
    products_pages: tuple[ShopifyPayload, ShopifyPayload],
) -> None:
    data = _nodes(products_pages[0]).data
    assert data is not None

    product = translate_product_node(data.products.edges[0].node, currency="EUR")

    assert product.external_id == "gid://shopify/Product/1001"
    assert product.name == "Linen Shirt"
    assert product.description == "<p>Breathable linen.</p>"
    assert product.image_url == "https://cdn.shopify.com/shirt.jpg"
    assert product.active is True
    assert product.currency == "EUR"
    assert product.has_variants is True

    white, blue = product.variants
    assert white.external_id == "gid://shopify/ProductVariant/2001"
    assert white.name == "White / M"
    assert white.price == Decimal("49.90")
    assert white.compare_at_price == Decimal("59.90")
    assert white.barcode is None
    assert white.options == (("Color", "White"), ("Size", "M"))
    assert white.weight_unit is WeightUnit.KILOGRAMS
    assert white.image_url == "https://cdn.shopify.com/shirt-white.jpg"
    assert blue.inventory_quantity == 0
    assert blue.inventory_policy is InventoryPolicy.CONTINUE
    assert blue.image_url is None
    assert blue.position == 2


def test_translate_product_node_handles_draft_single_variant(
    products_pages: tuple[ShopifyPayload, ShopifyPayload],
) -> None:
    data = _nodes(products_pages[0]).data
    assert data is not None

    product = translate_product_node(data.products.edges[1].node)

    assert product.active is False
    assert product.description is None
    assert product.image_url is None
    assert product.currency is None
    assert product.has_variants is False
    assert product.variants[0].name == ""
    assert product.variants[0].requires_shipping is False


def test_translate_webhook_product(webhook_product_payload: ShopifyPayload) -> None:
    product = translate_webhook_product(WebhookProduct.model_validate(webhook_product_payload))

    assert product.external_id == product_gid(1001)
    assert product.currency is None
    white, blue = product.variants
    assert white.external_id == "gid://shopify/ProductVariant/2001"
    assert white.name == "White / M"
    assert white.compare_at_price is None
    assert white.options == (("Color", "White"), ("Size", "M"))
    assert blue.compare_at_price == Decimal("59.90")
    assert blue.barcode is None
    assert blue.image_url == "https://cdn.shopify.com/shirt-blue.jpg"
    assert blue.inventory_policy is InventoryPolicy.CONTINUE
    assert blue.weight_unit is WeightUnit.KILOGRAMS


def test_sync_and_webhook_agree_on_identity_and_names(
    products_pages: tuple[ShopifyPayload, ShopifyPayload],
    webhook_product_payload: ShopifyPayload,
) -> None:
    data = _nodes(products_pages[0]).data
    assert data is not None
    listed = translate_product_node(data.products.edges[0].node)
    pushed = translate_webhook_product(WebhookProduct.model_validate(webhook_product_payload))

    assert listed.external_id == pushed.external_id
    assert [v.external_id for v in listed.variants] == [v.external_id for v in pushed.variants]
    assert [v.name for v in listed.variants] == [v.name for v in pushed.variants]


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        (("Red", "L"), "Red / L"),
        (("Default Title",), ""),
        (("Blue", None, None), "Blue"),
    ],
)
def test_variant_display_name(values: tuple[str | None, ...], expected: str) -> None:
    assert variant_display_name(values) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("KILOGRAMS", WeightUnit.KILOGRAMS),
        ("g", WeightUnit.GRAMS),
        ("POUNDS", WeightUnit.POUNDS),
        ("oz", WeightUnit.OUNCES),
        ("STONE", None),
        (None, None),
    ],
)
def test_parse_weight_unit(raw: str | None, expected: WeightUnit | None) -> None:
    assert parse_weight_unit(raw) is expected


def test_parse_inventory_policy_defaults_to_deny() -> None:
    assert parse_inventory_policy("CONTINUE") is InventoryPolicy.CONTINUE
    assert parse_inventory_policy("deny") is InventoryPolicy.DENY
    assert parse_inventory_policy(None) is InventoryPolicy.DENY


def test_parse_webhook_update_of_active_product(webhook_product_payload: ShopifyPayload) -> None:
    (event,) = parse_webhook("products/update", webhook_product_payload)

    assert event.kind is EventKind.UPSERT
    assert event.entity is EventEntity.PRODUCT
    assert event.product is not None
    assert event.external_product_id == "gid://shopify/Product/1001"


def test_parse_webhook_update_to_draft_removes(webhook_product_payload: ShopifyPayload) -> None:
    payload = {**webhook_product_payload, "status": "draft"}

    (event,) = parse_webhook("products/update", payload)

    assert event == parse_webhook("products/delete", {"id": 1001})[0]
    assert event.kind is EventKind.REMOVE


def test_parse_webhook_ignores_draft_creation(webhook_product_payload: ShopifyPayload) -> None:
    payload = {**webhook_product_payload, "status": "draft"}

    assert parse_webhook("products/create", payload) == []


def test_parse_webhook_ignores_unknown_topics() -> None:
    assert parse_webhook("orders/create", {"id": 1}) == []


def test_parse_webhook_rejects_malformed_payload() -> None:
    with pytest.raises(CatalogValidationError):
        parse_webhook("products/update", {"id": 1001})
