"""Synchronization defaults for catalog reconciliation."""

from __future__ import annotations

from dataclasses import dataclass

from .env import int_env_var, optional_env_var
from .errors import ConfigurationError

DEFAULT_PAGE_SIZE = 50
# Shopify caps `first` on connections at 250
MAX_PAGE_SIZE = 250
DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True, slots=True)
class SyncConfig:
    page_size: int = DEFAULT_PAGE_SIZE
    default_currency: str = DEFAULT_CURRENCY


def get_sync_config() -> SyncConfig:
    currency = (optional_env_var("CATALOG_DEFAULT_CURRENCY", DEFAULT_CURRENCY) or "").upper()
    if len(currency) != 3 or not currency.isalpha():
        raise ConfigurationError(
            f"CATALOG_DEFAULT_CURRENCY must be a 3-letter ISO code, got {currency!r}"
        )
    page_size = int_env_var(
        "CATALOG_SYNC_PAGE_SIZE", DEFAULT_PAGE_SIZE, minimum=1, maximum=MAX_PAGE_SIZE
    )
    return SyncConfig(page_size=page_size, default_currency=currency)
