"""Full reconciliation of the local catalog against the upstream listing."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_sync.domain.catalog_upsert import upsert_product, upsert_variant
from catalog_sync.domain.connections import get_connection, update_sync_status
from catalog_sync.domain.errors import CatalogValidationError, NotConnectedError
from catalog_sync.domain.model import SyncStatus, utcnow
from catalog_sync.domain.ports import UpstreamError

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from catalog_sync.domain.ports import (
        CatalogFetcher,
        CatalogRepositories,
        CatalogUnitOfWorkFactory,
        UpstreamProduct,
    )

log = getLogger(__name__)

DEFAULT_SYNC_PAGE_SIZE = 50


@dataclass(slots=True)
class CatalogSyncResult:
    """Outcome of one full sync run."""

    added: int = 0
    updated: int = 0
    removed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    status: SyncStatus = SyncStatus.SUCCESS
    swept: bool = False

    @property
    def imported(self) -> int:
        return self.added + self.updated

    @property
    def committed(self) -> int:
        return self.added + self.updated + self.removed


@dataclass(slots=True)
class SeenIds:
    """External ids observed during one run."""

    products: set[str] = field(default_factory=set)
    variants: set[str] = field(default_factory=set)

    def observe(self, upstream: UpstreamProduct) -> None:
        self.products.add(upstream.external_id)
        self.variants.update(variant.external_id for variant in upstream.variants)


def sync_catalog(
    *,
    business_id: UUID,
    fetcher: CatalogFetcher,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    page_size: int = DEFAULT_SYNC_PAGE_SIZE,
    default_currency: str | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> CatalogSyncResult:
    """Import every upstream product, then mark unseen synced rows unavailable.

    Each product is written in its own unit of work. A failing item is recorded
    in ``errors`` and the run moves on. An ``UpstreamError`` ends the listing
    early; the removal sweep is then skipped because the seen sets are incomplete.
    """

    if get_connection(business_id=business_id, unit_of_work_factory=unit_of_work_factory) is None:
        raise NotConnectedError(f"Business {business_id} is not connected")

    log.info("Starting catalog sync: business=%s, page_size=%s", business_id, page_size)
    result = CatalogSyncResult()
    seen = SeenIds()
    listing_complete = False
    try:
        for page in fetcher(page_size=page_size):
            for upstream in page.products:
                _sync_product(
                    upstream,
                    business_id=business_id,
                    unit_of_work_factory=unit_of_work_factory,
                    default_currency=default_currency,
                    clock=clock,
                    seen=seen,
                    result=result,
                )
        listing_complete = True
    except UpstreamError as exc:
        log.error("Catalog listing aborted for business %s: %s", business_id, exc)  # noqa: TRY400
        result.errors.append(f"Upstream listing failed: {exc}")

    if listing_complete:
        with unit_of_work_factory() as uow:
            result.removed = sweep_unseen(
                uow.repositories, business_id=business_id, seen=seen, now=clock()
            )
            uow.commit()
        result.swept = True
        log.info("Removal sweep marked %s rows unavailable", result.removed)
    else:
        log.warning("Skipping removal sweep for business %s: listing incomplete", business_id)

    result.status = resolve_status(result)
    update_sync_status(
        business_id=business_id,
        status=result.status,
        unit_of_work_factory=unit_of_work_factory,
        clock=clock,
    )
    log.info(
        f"Finished catalog sync: status={result.status}, added={result.added}, "
        f"updated={result.updated}, removed={result.removed}, skipped={result.skipped}, "
        f"errors={len(result.errors)}"
    )
    return result


def sweep_unseen(
    repositories: CatalogRepositories,
    *,
    business_id: UUID,
    seen: SeenIds,
    now: datetime,
) -> int:
    """Mark available synced rows whose external id was not seen. Returns the count."""

    removed = 0
    for product in repositories.products.list_synced(business_id, available_only=True):
        if product.external_product_id not in seen.products:
            product.mark_unavailable(now=now)
            removed += 1
    for variant in repositories.variants.list_synced_for_business(business_id, available_only=True):
        if variant.external_variant_id not in seen.variants:
            variant.mark_unavailable(now=now)
            removed += 1
    return removed


def resolve_status(result: CatalogSyncResult) -> SyncStatus:
    if not result.errors:
        return SyncStatus.SUCCESS
    if result.committed > 0:
        return SyncStatus.PARTIAL
    return SyncStatus.FAILED


def _sync_product(
    upstream: UpstreamProduct,
    *,
    business_id: UUID,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    default_currency: str | None,
    clock: Callable[[], datetime],
    seen: SeenIds,
    result: CatalogSyncResult,
) -> None:
    # listed items count as seen even when their write fails; the row keeps its last state
    seen.observe(upstream)
    if not upstream.active:
        result.skipped += 1
        return

    try:
        with unit_of_work_factory() as uow:
            now = clock()
            written = upsert_product(
                uow.repositories,
                business_id=business_id,
                upstream=upstream,
                now=now,
                fallback_currency=default_currency,
            )
            for variant in upstream.variants:
                upsert_variant(
                    uow.repositories, product_id=written.record.id, upstream=variant, now=now
                )
            uow.commit()
    except CatalogValidationError as exc:
        log.warning("Skipping product %s: %s", upstream.external_id, exc)
        result.errors.append(f'Failed to sync "{upstream.name}": {exc}')
        return
    except Exception as exc:  # noqa: BLE001
        log.exception("Failed to store product %s", upstream.external_id)
        result.errors.append(f'Failed to sync "{upstream.name}": {exc}')
        return

    if written.is_new:
        result.added += 1
    else:
        result.updated += 1
