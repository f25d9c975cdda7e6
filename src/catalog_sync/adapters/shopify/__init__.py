"""Public interface for the Shopify adapter."""

from __future__ import annotations

from .client import ShopifyAPIError, ShopifyClient, exchange_code
from .fetcher import ShopifyCatalogFetcher
from .translator import parse_webhook, translate_product_node, translate_webhook_product
from .webhooks import (
    compute_signature,
    register_webhooks,
    release_shop,
    verify_webhook_signature,
)

__all__ = [
    "ShopifyAPIError",
    "ShopifyCatalogFetcher",
    "ShopifyClient",
    "compute_signature",
    "exchange_code",
    "parse_webhook",
    "register_webhooks",
    "release_shop",
    "translate_product_node",
    "translate_webhook_product",
    "verify_webhook_signature",
]
