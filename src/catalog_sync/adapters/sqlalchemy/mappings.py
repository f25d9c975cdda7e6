"""SQLAlchemy mapping metadata for the catalog model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from catalog_sync.domain.model import (
    Connection,
    InventoryPolicy,
    Product,
    ProductSource,
    SyncStatus,
    Variant,
    WeightUnit,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _load_string_items(value: str | None) -> list[str]:
    if value is None:
        return []
    loaded = json.loads(value)
    if not isinstance(loaded, list):
        return []
    items = cast(list[Any], loaded)
    return [item for item in items if isinstance(item, str)]


class StringListType(TypeDecorator[list[str]]):
    """Ordered strings stored as a JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[str]:
        _ = dialect
        return _load_string_items(value)


class StringSetType(TypeDecorator[set[str]]):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value: set[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(sorted(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> set[str]:
        _ = dialect
        return set(_load_string_items(value))


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Core tables -----------------------------------------------------------------

connection_table = Table(
    "shop_connection",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("business_id", UUIDColumnType, nullable=False, unique=True),
    Column("shop", String, nullable=False, index=True),
    Column("access_token", String, nullable=False),
    Column("scopes", StringListType(), nullable=False),
    Column("webhook_ids", StringSetType(), nullable=False),
    Column("last_sync_at", UTCDateTime(), nullable=True),
    Column("last_sync_status", Enum(SyncStatus, native_enum=False), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
)

product_table = Table(
    "product",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("business_id", UUIDColumnType, nullable=False, index=True),
    Column("name", String, nullable=False),
    Column("description", Text, nullable=True),
    Column("image_url", String, nullable=True),
    Column("has_variants", Boolean, nullable=False),
    Column("price", Integer, nullable=True),
    Column("currency", String(3), nullable=True),
    Column("source", Enum(ProductSource, native_enum=False), nullable=False),
    Column("external_product_id", String, nullable=True),
    Column("display_order", Integer, key="order", nullable=False),
    Column("available", Boolean, nullable=False),
    Column("deleted", Boolean, nullable=False),
    Column("last_sync_at", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint(
        "business_id", "source", "external_product_id", name="uq_product_external_identity"
    ),
)

variant_table = Table(
    "product_variant",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("product_id", UUIDColumnType, ForeignKey("product.id"), nullable=False),
    Column("name", String, nullable=False),
    Column("price", Integer, nullable=False),
    Column("sku", String, nullable=True),
    Column("barcode", String, nullable=True),
    Column("compare_at_price", Integer, nullable=True),
    Column("inventory_quantity", Integer, nullable=False),
    Column("inventory_policy", Enum(InventoryPolicy, native_enum=False), nullable=False),
    Column("track_inventory", Boolean, nullable=False),
    Column("option1_name", String, nullable=True),
    Column("option1_value", String, nullable=True),
    Column("option2_name", String, nullable=True),
    Column("option2_value", String, nullable=True),
    Column("option3_name", String, nullable=True),
    Column("option3_value", String, nullable=True),
    Column("image_url", String, nullable=True),
    Column("weight", Float, nullable=True),
    Column("weight_unit", Enum(WeightUnit, native_enum=False), nullable=True),
    Column("requires_shipping", Boolean, nullable=True),
    Column("position", Integer, nullable=False),
    Column("external_variant_id", String, nullable=True, unique=True),
    Column("available", Boolean, nullable=False),
    Column("last_sync_at", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Index("ix_product_variant_product", "product_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the catalog model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Connection, connection_table)
    mapper_registry.map_imperatively(Product, product_table)
    mapper_registry.map_imperatively(Variant, variant_table)

    configure_mappers()
    return mapper_registry

