"""Shopify configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env_var, require_env_vars

DEFAULT_API_VERSION: Final[str] = "2024-01"

WEBHOOK_TOPICS: Final[tuple[str, ...]] = (
    "products/create",
    "products/update",
    "products/delete",
)


@dataclass(frozen=True, slots=True)
class ShopifyConfig:
    api_version: str = DEFAULT_API_VERSION
    webhook_address: str | None = None
    webhook_topics: tuple[str, ...] = WEBHOOK_TOPICS


@dataclass(frozen=True, slots=True)
class ShopifyCredentials:
    """App credentials; needed for the OAuth exchange and webhook verification."""

    api_key: str
    api_secret: str


def get_shopify_config() -> ShopifyConfig:
    return ShopifyConfig(
        api_version=optional_env_var("SHOPIFY_API_VERSION", DEFAULT_API_VERSION)
        or DEFAULT_API_VERSION,
        webhook_address=optional_env_var("SHOPIFY_WEBHOOK_ADDRESS"),
    )


def get_shopify_credentials() -> ShopifyCredentials:
    values = require_env_vars(("SHOPIFY_API_KEY", "SHOPIFY_API_SECRET"))
    return ShopifyCredentials(
        api_key=values["SHOPIFY_API_KEY"],
        api_secret=values["SHOPIFY_API_SECRET"],
    )
