"""Public domain model surface."""

from __future__ import annotations

from catalog_sync.domain.model.catalog import Product, Variant
from catalog_sync.domain.model.connection import Connection
from catalog_sync.domain.model.entity import Entity, new_id, utcnow
from catalog_sync.domain.model.enums import (
    EventEntity,
    EventKind,
    InventoryPolicy,
    ProductSource,
    SyncStatus,
    WeightUnit,
)

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    "utcnow",
    # records
    "Connection",
    "Product",
    "Variant",
    # enums
    "EventEntity",
    "EventKind",
    "InventoryPolicy",
    "ProductSource",
    "SyncStatus",
    "WeightUnit",
]
