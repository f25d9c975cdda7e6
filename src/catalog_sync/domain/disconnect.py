"""Severing the upstream link without losing any catalog data."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_sync.domain.model import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from catalog_sync.domain.ports import CatalogUnitOfWorkFactory

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DetachResult:
    connection_removed: bool
    products: int
    variants: int


def disconnect(
    *,
    business_id: UUID,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    clock: Callable[[], datetime] = utcnow,
) -> DetachResult:
    """Delete the connection and turn every synced row into a manual one.

    Names, prices, descriptions and availability stay as last synced. No row is
    deleted; only the source marker, external ids and ``last_sync_at`` are cleared.
    """

    detached_products = 0
    detached_variants = 0
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        now = clock()
        connection = repositories.connections.get_by_business(business_id)
        if connection is not None:
            repositories.connections.remove(connection)
        for product in repositories.products.list_synced(business_id):
            for variant in repositories.variants.list_for_product(product.id):
                if variant.external_variant_id is None:
                    continue
                variant.detach(now=now)
                detached_variants += 1
            product.detach(now=now)
            detached_products += 1
        uow.commit()

    log.info(
        "Disconnected business %s: detached %s products and %s variants",
        business_id,
        detached_products,
        detached_variants,
    )
    return DetachResult(
        connection_removed=connection is not None,
        products=detached_products,
        variants=detached_variants,
    )
