"""Apply single upstream change events to the local catalog."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_sync.domain.catalog_upsert import (
    mark_product_removed,
    mark_variant_removed,
    upsert_product,
    upsert_variant,
)
from catalog_sync.domain.errors import CatalogValidationError, UnknownProductError
from catalog_sync.domain.model import EventEntity, EventKind, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from catalog_sync.domain.ports import (
        CatalogRepositories,
        CatalogUnitOfWorkFactory,
        UpstreamProduct,
        UpstreamVariant,
    )

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WebhookEvent:
    """One discrete change notification for a product or a variant."""

    kind: EventKind
    entity: EventEntity
    external_product_id: str | None = None
    external_variant_id: str | None = None
    product: UpstreamProduct | None = None
    variant: UpstreamVariant | None = None

    @classmethod
    def product_upserted(cls, product: UpstreamProduct) -> WebhookEvent:
        return cls(
            kind=EventKind.UPSERT,
            entity=EventEntity.PRODUCT,
            external_product_id=product.external_id,
            product=product,
        )

    @classmethod
    def product_removed(cls, external_product_id: str) -> WebhookEvent:
        return cls(
            kind=EventKind.REMOVE,
            entity=EventEntity.PRODUCT,
            external_product_id=external_product_id,
        )

    @classmethod
    def variant_upserted(cls, external_product_id: str, variant: UpstreamVariant) -> WebhookEvent:
        return cls(
            kind=EventKind.UPSERT,
            entity=EventEntity.VARIANT,
            external_product_id=external_product_id,
            external_variant_id=variant.external_id,
            variant=variant,
        )

    @classmethod
    def variant_removed(cls, external_variant_id: str) -> WebhookEvent:
        return cls(
            kind=EventKind.REMOVE,
            entity=EventEntity.VARIANT,
            external_variant_id=external_variant_id,
        )


def ingest_webhook(
    *,
    business_id: UUID,
    event: WebhookEvent,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    default_currency: str | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> None:
    """Apply ``event`` in one unit of work. Errors propagate to the caller.

    Writes are unconditional and keyed by external id, so a replayed event
    leaves the catalog unchanged and the last applied event wins.
    """

    with unit_of_work_factory() as uow:
        now = clock()
        repositories = uow.repositories
        if event.kind is EventKind.UPSERT and event.entity is EventEntity.PRODUCT:
            _apply_product_upsert(
                repositories,
                business_id=business_id,
                event=event,
                default_currency=default_currency,
                now=now,
            )
        elif event.kind is EventKind.UPSERT:
            _apply_variant_upsert(repositories, business_id=business_id, event=event, now=now)
        elif event.entity is EventEntity.PRODUCT:
            touched = mark_product_removed(
                repositories,
                business_id=business_id,
                external_product_id=_require(event.external_product_id, "external_product_id"),
                now=now,
            )
            log.debug("Product removal touched %s rows", touched)
        else:
            mark_variant_removed(
                repositories,
                external_variant_id=_require(event.external_variant_id, "external_variant_id"),
                now=now,
            )
        uow.commit()
    log.info(
        "Applied %s %s event for business %s (product=%s, variant=%s)",
        event.entity,
        event.kind,
        business_id,
        event.external_product_id,
        event.external_variant_id,
    )


def _apply_product_upsert(
    repositories: CatalogRepositories,
    *,
    business_id: UUID,
    event: WebhookEvent,
    default_currency: str | None,
    now: datetime,
) -> None:
    product = event.product
    if product is None:
        raise CatalogValidationError("Product upsert event carries no product")
    written = upsert_product(
        repositories,
        business_id=business_id,
        upstream=product,
        now=now,
        fallback_currency=default_currency,
    )
    for variant in product.variants:
        upsert_variant(repositories, product_id=written.record.id, upstream=variant, now=now)


def _apply_variant_upsert(
    repositories: CatalogRepositories,
    *,
    business_id: UUID,
    event: WebhookEvent,
    now: datetime,
) -> None:
    variant = event.variant
    if variant is None:
        raise CatalogValidationError("Variant upsert event carries no variant")
    external_product_id = _require(event.external_product_id, "external_product_id")
    product = repositories.products.get_by_external_id(business_id, external_product_id)
    if product is None:
        raise UnknownProductError(
            f"Variant {variant.external_id} references unknown product {external_product_id}"
        )
    upsert_variant(repositories, product_id=product.id, upstream=variant, now=now)


def _require(value: str | None, name: str) -> str:
    if not value:
        raise CatalogValidationError(f"Event is missing {name}")
    return value
