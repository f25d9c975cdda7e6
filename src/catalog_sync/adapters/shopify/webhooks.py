"""Shopify webhook subscriptions and delivery verification."""

from __future__ import annotations

import base64
import hashlib
import hmac
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_sync.domain.errors import WebhookVerificationError

from .client import ShopifyAPIError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .client import ShopifyClient

log = getLogger(__name__)

HMAC_HEADER = "X-Shopify-Hmac-Sha256"
TOPIC_HEADER = "X-Shopify-Topic"
SHOP_DOMAIN_HEADER = "X-Shopify-Shop-Domain"


def compute_signature(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_webhook_signature(secret: str, body: bytes, signature: str | None) -> None:
    """Raise ``WebhookVerificationError`` unless ``signature`` signs the raw ``body``."""

    if not signature:
        raise WebhookVerificationError(f"Missing {HMAC_HEADER} header")
    expected = compute_signature(secret, body).encode("ascii")
    if not hmac.compare_digest(expected, signature.strip().encode("utf-8")):
        raise WebhookVerificationError("Webhook signature mismatch")


def register_webhooks(
    client: ShopifyClient,
    *,
    address: str,
    topics: Iterable[str],
) -> list[str]:
    """Subscribe ``address`` to every topic and return the subscription ids.

    Subscriptions that already point at ``address`` are reused. A topic that fails
    to register is logged and left out of the result.
    """

    try:
        existing = {
            hook.topic: str(hook.id) for hook in client.list_webhooks() if hook.address == address
        }
    except ShopifyAPIError as exc:
        log.warning("Failed to list Shopify webhooks for %s: %s", client.shop, exc)
        existing = {}

    webhook_ids: list[str] = []
    for topic in topics:
        if topic in existing:
            webhook_ids.append(existing[topic])
            continue
        try:
            created = client.create_webhook(topic=topic, address=address)
        except ShopifyAPIError as exc:
            log.warning("Failed to register Shopify webhook for %s: %s", topic, exc)
            continue
        webhook_ids.append(str(created.id))
    return webhook_ids


def release_shop(client: ShopifyClient, *, webhook_ids: Iterable[str]) -> None:
    """Delete the given subscriptions and revoke the access token, best effort."""

    for webhook_id in webhook_ids:
        try:
            client.delete_webhook(webhook_id)
        except ShopifyAPIError as exc:
            log.warning("Failed to delete Shopify webhook %s: %s", webhook_id, exc)
    try:
        client.revoke_access_token()
    except ShopifyAPIError as exc:
        log.warning("Failed to revoke Shopify access token for %s: %s", client.shop, exc)
