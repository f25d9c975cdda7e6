"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ProductSource(StrEnum):
    """Who owns a catalog row: the business itself or the upstream platform."""

    MANUAL = "manual"
    SYNCED = "synced"


class SyncStatus(StrEnum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class InventoryPolicy(StrEnum):
    DENY = "deny"
    CONTINUE = "continue"


class WeightUnit(StrEnum):
    KILOGRAMS = "kg"
    GRAMS = "g"
    POUNDS = "lb"
    OUNCES = "oz"


class EventKind(StrEnum):
    UPSERT = "upsert"
    REMOVE = "remove"


class EventEntity(StrEnum):
    PRODUCT = "product"
    VARIANT = "variant"
