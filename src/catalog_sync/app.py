"""Application orchestration entry points."""

from __future__ import annotations

import json
from collections.abc import Callable
from contextlib import ExitStack, closing
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_sync.adapters.shopify import (
    ShopifyCatalogFetcher,
    ShopifyClient,
    exchange_code,
    parse_webhook,
    register_webhooks,
    release_shop,
    verify_webhook_signature,
)
from catalog_sync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from catalog_sync.config import (
    get_shopify_config,
    get_shopify_credentials,
    get_sync_config,
)
from catalog_sync.domain import connections, webhook_ingest
from catalog_sync.domain import disconnect as detach
from catalog_sync.domain.catalog_sync import sync_catalog
from catalog_sync.domain.errors import CatalogValidationError, NotConnectedError

if TYPE_CHECKING:
    from uuid import UUID

    from catalog_sync.adapters.shopify.schema import AccessTokenResponse
    from catalog_sync.config import ShopifyConfig, ShopifyCredentials, SyncConfig
    from catalog_sync.domain.catalog_sync import CatalogSyncResult
    from catalog_sync.domain.connections import ConnectionStatus
    from catalog_sync.domain.disconnect import DetachResult
    from catalog_sync.domain.ports import CatalogFetcher, CatalogUnitOfWorkFactory
    from catalog_sync.domain.webhook_ingest import WebhookEvent

ClientBuilder = Callable[[str, str], ShopifyClient]
CodeExchanger = Callable[..., "AccessTokenResponse"]


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OAuthResult:
    """Outcome of a completed OAuth handshake."""

    access_token: str
    scopes: tuple[str, ...] = ()


def ensure_started() -> None:
    if not is_started():
        startup()


def _unit_of_work_factory(
    unit_of_work_factory: CatalogUnitOfWorkFactory | None,
) -> CatalogUnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    ensure_started()
    return SqlAlchemyCatalogUnitOfWork


def _client_builder(
    client_builder: ClientBuilder | None,
    config: ShopifyConfig,
) -> ClientBuilder:
    if client_builder is not None:
        return client_builder

    def build(shop: str, access_token: str) -> ShopifyClient:
        return ShopifyClient(shop=shop, access_token=access_token, api_version=config.api_version)

    return build


def connect(
    *,
    business_id: UUID,
    shop: str,
    oauth: OAuthResult,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    client_builder: ClientBuilder | None = None,
    shopify_config: ShopifyConfig | None = None,
) -> UUID:
    """Store the business's credentials and subscribe to catalog change webhooks."""

    config = shopify_config or get_shopify_config()
    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    normalized_shop = connections.normalize_shop_domain(shop)
    connection_id = connections.save_connection(
        business_id=business_id,
        shop=normalized_shop,
        access_token=oauth.access_token,
        scopes=oauth.scopes,
        unit_of_work_factory=effective_uow,
    )

    if config.webhook_address is None:
        log.info("No webhook address configured; skipping webhook registration")
        return connection_id

    build = _client_builder(client_builder, config)
    with closing(build(normalized_shop, oauth.access_token)) as client:
        webhook_ids = register_webhooks(
            client, address=config.webhook_address, topics=config.webhook_topics
        )
    if len(webhook_ids) < len(config.webhook_topics):
        log.warning(
            "Registered %s of %s webhooks for %s",
            len(webhook_ids),
            len(config.webhook_topics),
            normalized_shop,
        )
    if webhook_ids:
        connections.update_webhook_ids(
            business_id=business_id,
            webhook_ids=webhook_ids,
            unit_of_work_factory=effective_uow,
        )
    return connection_id


def connect_with_code(
    *,
    business_id: UUID,
    shop: str,
    code: str,
    credentials: ShopifyCredentials | None = None,
    code_exchanger: CodeExchanger = exchange_code,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    client_builder: ClientBuilder | None = None,
    shopify_config: ShopifyConfig | None = None,
) -> UUID:
    """Exchange an OAuth authorization code for a token, then connect."""

    effective_credentials = credentials or get_shopify_credentials()
    normalized_shop = connections.normalize_shop_domain(shop)
    token = code_exchanger(
        shop=normalized_shop,
        code=code,
        api_key=effective_credentials.api_key,
        api_secret=effective_credentials.api_secret,
    )
    return connect(
        business_id=business_id,
        shop=normalized_shop,
        oauth=OAuthResult(access_token=token.access_token, scopes=tuple(token.scopes)),
        unit_of_work_factory=unit_of_work_factory,
        client_builder=client_builder,
        shopify_config=shopify_config,
    )


def import_or_sync(
    *,
    business_id: UUID,
    fetcher: CatalogFetcher | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    client_builder: ClientBuilder | None = None,
    sync_config: SyncConfig | None = None,
    shopify_config: ShopifyConfig | None = None,
) -> CatalogSyncResult:
    """Run a full catalog sync for a connected business."""

    settings = sync_config or get_sync_config()
    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    connection = connections.get_connection(
        business_id=business_id, unit_of_work_factory=effective_uow
    )
    if connection is None:
        raise NotConnectedError(f"Business {business_id} is not connected")

    log.info(
        "Starting catalog import: business=%s, shop=%s, page_size=%s",
        business_id,
        connection.shop,
        settings.page_size,
    )
    with ExitStack() as stack:
        effective_fetcher = fetcher
        if effective_fetcher is None:
            build = _client_builder(client_builder, shopify_config or get_shopify_config())
            client = stack.enter_context(closing(build(connection.shop, connection.access_token)))
            effective_fetcher = ShopifyCatalogFetcher(client=client)
        result = sync_catalog(
            business_id=business_id,
            fetcher=effective_fetcher,
            unit_of_work_factory=effective_uow,
            page_size=settings.page_size,
            default_currency=settings.default_currency,
        )
    log.info(
        f"Finished catalog import: status={result.status}, imported={result.imported}, "
        f"removed={result.removed}, errors={len(result.errors)}"
    )
    return result


def ingest_webhook(
    *,
    business_id: UUID,
    event: WebhookEvent,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> None:
    settings = sync_config or get_sync_config()
    webhook_ingest.ingest_webhook(
        business_id=business_id,
        event=event,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        default_currency=settings.default_currency,
    )


def handle_shopify_webhook(
    *,
    topic: str,
    shop: str,
    body: bytes,
    signature: str | None,
    credentials: ShopifyCredentials | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> int:
    """Verify, route and apply one raw Shopify webhook delivery.

    Returns the number of change events applied. Deliveries for shops without a
    connection are dropped.
    """

    effective_credentials = credentials or get_shopify_credentials()
    verify_webhook_signature(effective_credentials.api_secret, body, signature)

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    connection = connections.find_connection_by_shop(
        shop=connections.normalize_shop_domain(shop), unit_of_work_factory=effective_uow
    )
    if connection is None:
        log.warning("Dropping %s webhook for unknown shop %s", topic, shop)
        return 0

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise CatalogValidationError(f"Webhook body for {topic} is not JSON") from exc

    events = parse_webhook(topic, payload)
    for event in events:
        ingest_webhook(
            business_id=connection.business_id,
            event=event,
            unit_of_work_factory=effective_uow,
            sync_config=sync_config,
        )
    return len(events)


def get_connection_status(
    *,
    business_id: UUID,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> ConnectionStatus:
    return connections.get_connection_status(
        business_id=business_id,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )


def disconnect(
    *,
    business_id: UUID,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    client_builder: ClientBuilder | None = None,
    shopify_config: ShopifyConfig | None = None,
) -> DetachResult:
    """Release the shop upstream (best effort), then detach the local catalog."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    connection = connections.get_connection(
        business_id=business_id, unit_of_work_factory=effective_uow
    )
    if connection is not None:
        build = _client_builder(client_builder, shopify_config or get_shopify_config())
        with closing(build(connection.shop, connection.access_token)) as client:
            release_shop(client, webhook_ids=sorted(connection.webhook_ids))
    else:
        log.info("Business %s has no connection; detaching leftover synced rows", business_id)

    return detach.disconnect(business_id=business_id, unit_of_work_factory=effective_uow)
