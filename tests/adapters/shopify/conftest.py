"""Shared fixtures for Shopify adapter tests."""

from __future__ import annotations

import pytest

from tests.helpers.shopify import ShopifyPayload, load_shopify_fixture


@pytest.fixture
def products_pages() -> tuple[ShopifyPayload, ShopifyPayload]:
    return load_shopify_fixture("products_page_1.json"), load_shopify_fixture("products_page_2.json")


@pytest.fixture
def webhook_product_payload() -> ShopifyPayload:
    return load_shopify_fixture("webhook_product_update.json")
