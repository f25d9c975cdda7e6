"""Create connection, product and variant tables.

Revision ID: 0001_initial_catalog
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from catalog_sync.adapters.sqlalchemy.mappings import StringListType, StringSetType, UTCDateTime

revision = "0001_initial_catalog"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "shop_connection",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("business_id", sa.Uuid(), nullable=False),
        sa.Column("shop", sa.String(), nullable=False),
        sa.Column("access_token", sa.String(), nullable=False),
        sa.Column("scopes", StringListType(), nullable=False),
        sa.Column("webhook_ids", StringSetType(), nullable=False),
        sa.Column("last_sync_at", UTCDateTime(), nullable=True),
        sa.Column(
            "last_sync_status",
            sa.Enum("SUCCESS", "PARTIAL", "FAILED", name="syncstatus", native_enum=False),
            nullable=True,
        ),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_shop_connection")),
        sa.UniqueConstraint("business_id", name=op.f("uq_shop_connection_business_id")),
    )
    with op.batch_alter_table("shop_connection") as batch_op:
        batch_op.create_index(op.f("ix_shop_connection_shop"), ["shop"], unique=False)

    op.create_table(
        "product",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("business_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("has_variants", sa.Boolean(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=True),
        sa.Column(
            "source",
            sa.Enum("MANUAL", "SYNCED", name="productsource", native_enum=False),
            nullable=False,
        ),
        sa.Column("external_product_id", sa.String(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("available", sa.Boolean(), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False),
        sa.Column("last_sync_at", UTCDateTime(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_product")),
        sa.UniqueConstraint(
            "business_id",
            "source",
            "external_product_id",
            name=op.f("uq_product_external_identity"),
        ),
    )
    with op.batch_alter_table("product") as batch_op:
        batch_op.create_index(op.f("ix_product_business_id"), ["business_id"], unique=False)

    op.create_table(
        "product_variant",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("sku", sa.String(), nullable=True),
        sa.Column("barcode", sa.String(), nullable=True),
        sa.Column("compare_at_price", sa.Integer(), nullable=True),
        sa.Column("inventory_quantity", sa.Integer(), nullable=False),
        sa.Column(
            "inventory_policy",
            sa.Enum("DENY", "CONTINUE", name="inventorypolicy", native_enum=False),
            nullable=False,
        ),
        sa.Column("track_inventory", sa.Boolean(), nullable=False),
        sa.Column("option1_name", sa.String(), nullable=True),
        sa.Column("option1_value", sa.String(), nullable=True),
        sa.Column("option2_name", sa.String(), nullable=True),
        sa.Column("option2_value", sa.String(), nullable=True),
        sa.Column("option3_name", sa.String(), nullable=True),
        sa.Column("option3_value", sa.String(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column(
            "weight_unit",
            sa.Enum("KILOGRAMS", "GRAMS", "POUNDS", "OUNCES", name="weightunit", native_enum=False),
            nullable=True,
        ),
        sa.Column("requires_shipping", sa.Boolean(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("external_variant_id", sa.String(), nullable=True),
        sa.Column("available", sa.Boolean(), nullable=False),
        sa.Column("last_sync_at", UTCDateTime(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["product_id"],
            ["product.id"],
            name=op.f("fk_product_variant_product_id_product"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_product_variant")),
        sa.UniqueConstraint(
            "external_variant_id", name=op.f("uq_product_variant_external_variant_id")
        ),
    )
    with op.batch_alter_table("product_variant") as batch_op:
        batch_op.create_index("ix_product_variant_product", ["product_id"], unique=False)


def downgrade() -> None:
    with op.batch_alter_table("product_variant") as batch_op:
        batch_op.drop_index("ix_product_variant_product")
    op.drop_table("product_variant")
    with op.batch_alter_table("product") as batch_op:
        batch_op.drop_index(op.f("ix_product_business_id"))
    op.drop_table("product")
    with op.batch_alter_table("shop_connection") as batch_op:
        batch_op.drop_index(op.f("ix_shop_connection_shop"))
    op.drop_table("shop_connection")
