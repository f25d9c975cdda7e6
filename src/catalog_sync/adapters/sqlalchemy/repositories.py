"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select

from catalog_sync.adapters.sqlalchemy.mappings import (
    connection_table,
    product_table,
    variant_table,
)
from catalog_sync.domain.model import Connection, Product, ProductSource, Variant

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy.orm import Session


class SqlAlchemyConnectionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Connection) -> None:
        self.session.add(entity)

    def remove(self, entity: Connection) -> None:
        self.session.delete(entity)

    def get_by_business(self, business_id: uuid.UUID) -> Connection | None:
        stmt = select(Connection).where(connection_table.c.business_id == business_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_shop(self, shop: str) -> Connection | None:
        """Return the earliest link to ``shop`` when several businesses share it."""

        stmt = (
            select(Connection)
            .where(connection_table.c.shop == shop)
            .order_by(connection_table.c.created_at, connection_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyProductRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Product) -> None:
        self.session.add(entity)

    def get_by_external_id(
        self, business_id: uuid.UUID, external_product_id: str
    ) -> Product | None:
        stmt = (
            select(Product)
            .where(product_table.c.business_id == business_id)
            .where(product_table.c.source == ProductSource.SYNCED)
            .where(product_table.c.external_product_id == external_product_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_business(self, business_id: uuid.UUID) -> Sequence[Product]:
        stmt = (
            select(Product)
            .where(product_table.c.business_id == business_id)
            .order_by(product_table.c["order"])
        )
        return self.session.execute(stmt).scalars().all()

    def list_synced(
        self, business_id: uuid.UUID, *, available_only: bool = False
    ) -> Sequence[Product]:
        stmt = (
            select(Product)
            .where(product_table.c.business_id == business_id)
            .where(product_table.c.source == ProductSource.SYNCED)
            .where(product_table.c.external_product_id.is_not(None))
        )
        if available_only:
            stmt = stmt.where(product_table.c.available.is_(True))
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyVariantRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Variant) -> None:
        self.session.add(entity)

    def get_by_external_id(self, external_variant_id: str) -> Variant | None:
        stmt = select(Variant).where(variant_table.c.external_variant_id == external_variant_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_product(self, product_id: uuid.UUID) -> Sequence[Variant]:
        stmt = (
            select(Variant)
            .where(variant_table.c.product_id == product_id)
            .order_by(variant_table.c.position)
        )
        return self.session.execute(stmt).scalars().all()

    def list_synced_for_business(
        self, business_id: uuid.UUID, *, available_only: bool = False
    ) -> Sequence[Variant]:
        stmt = (
            select(Variant)
            .join(product_table, variant_table.c.product_id == product_table.c.id)
            .where(product_table.c.business_id == business_id)
            .where(variant_table.c.external_variant_id.is_not(None))
        )
        if available_only:
            stmt = stmt.where(variant_table.c.available.is_(True))
        return self.session.execute(stmt).scalars().all()


if TYPE_CHECKING:
    from catalog_sync.domain.ports.persistence import (
        ConnectionRepository,
        ProductRepository,
        VariantRepository,
    )

    _session_stub = cast("Session", object())
    _connection_repo: ConnectionRepository = SqlAlchemyConnectionRepository(_session_stub)
    _product_repo: ProductRepository = SqlAlchemyProductRepository(_session_stub)
    _variant_repo: VariantRepository = SqlAlchemyVariantRepository(_session_stub)
