"""Connection bookkeeping: one upstream link per business."""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_sync.domain.errors import InvalidShopDomainError
from catalog_sync.domain.model import Connection, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime
    from uuid import UUID

    from catalog_sync.domain.model import SyncStatus
    from catalog_sync.domain.ports import CatalogUnitOfWorkFactory

log = getLogger(__name__)

SHOP_DOMAIN_SUFFIX = ".myshopify.com"
_SHOP_NAME = re.compile(r"^[a-z0-9-]+$")
_SHOP_DOMAIN = re.compile(r"^([a-z0-9-]+)\.myshopify\.com$")


@dataclass(frozen=True, slots=True)
class ConnectionStatus:
    """What the business sees about its upstream link."""

    connected: bool
    shop: str | None = None
    last_sync_at: datetime | None = None
    last_sync_status: SyncStatus | None = None
    scopes: tuple[str, ...] = ()


def normalize_shop_domain(shop: str) -> str:
    """Return ``<name>.myshopify.com`` for a bare shop name or a full domain."""

    candidate = shop.strip().lower()
    candidate = candidate.removeprefix("https://").removeprefix("http://").rstrip("/")
    if _SHOP_NAME.match(candidate):
        return f"{candidate}{SHOP_DOMAIN_SUFFIX}"
    match = _SHOP_DOMAIN.match(candidate)
    if match:
        return f"{match.group(1)}{SHOP_DOMAIN_SUFFIX}"
    raise InvalidShopDomainError(f"Invalid shop domain: {shop!r}")


def save_connection(
    *,
    business_id: UUID,
    shop: str,
    access_token: str,
    scopes: Iterable[str],
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    clock: Callable[[], datetime] = utcnow,
) -> UUID:
    """Create the business's connection or overwrite it in place; return its id."""

    with unit_of_work_factory() as uow:
        connections = uow.repositories.connections
        connection = connections.get_by_business(business_id)
        if connection is not None:
            connection.overwrite_credentials(shop=shop, access_token=access_token, scopes=scopes)
            log.info("Updated connection for business %s (shop=%s)", business_id, shop)
        else:
            connection = Connection(
                business_id=business_id,
                shop=shop,
                access_token=access_token,
                scopes=list(scopes),
                created_at=clock(),
            )
            connections.add(connection)
            log.info("Created connection for business %s (shop=%s)", business_id, shop)
        connection_id = connection.id
        uow.commit()
    return connection_id


def update_sync_status(
    *,
    business_id: UUID,
    status: SyncStatus,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    clock: Callable[[], datetime] = utcnow,
) -> bool:
    """Record the outcome of a sync run. Returns ``False`` when there is no connection."""

    with unit_of_work_factory() as uow:
        connection = uow.repositories.connections.get_by_business(business_id)
        if connection is None:
            return False
        connection.record_sync(status, now=clock())
        uow.commit()
    return True


def update_webhook_ids(
    *,
    business_id: UUID,
    webhook_ids: Iterable[str],
    unit_of_work_factory: CatalogUnitOfWorkFactory,
) -> bool:
    with unit_of_work_factory() as uow:
        connection = uow.repositories.connections.get_by_business(business_id)
        if connection is None:
            return False
        connection.replace_webhook_ids(webhook_ids)
        uow.commit()
    return True


def get_connection(
    *,
    business_id: UUID,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
) -> Connection | None:
    with unit_of_work_factory() as uow:
        return uow.repositories.connections.get_by_business(business_id)


def find_connection_by_shop(
    *,
    shop: str,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
) -> Connection | None:
    with unit_of_work_factory() as uow:
        return uow.repositories.connections.get_by_shop(shop)


def get_connection_status(
    *,
    business_id: UUID,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
) -> ConnectionStatus:
    connection = get_connection(business_id=business_id, unit_of_work_factory=unit_of_work_factory)
    if connection is None:
        return ConnectionStatus(connected=False)
    return ConnectionStatus(
        connected=True,
        shop=connection.shop,
        last_sync_at=connection.last_sync_at,
        last_sync_status=connection.last_sync_status,
        scopes=tuple(connection.scopes),
    )
