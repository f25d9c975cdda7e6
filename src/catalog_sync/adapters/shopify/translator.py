"""Translate Shopify payloads into upstream catalog values and change events."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from catalog_sync.domain.errors import CatalogValidationError
from catalog_sync.domain.model import InventoryPolicy, WeightUnit
from catalog_sync.domain.ports import UpstreamProduct, UpstreamVariant
from catalog_sync.domain.webhook_ingest import WebhookEvent

from .schema import ProductNode, VariantNode, WebhookProduct, WebhookProductDeletion, WebhookVariant

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

log = getLogger(__name__)

PRODUCT_GID_PREFIX = "gid://shopify/Product/"
VARIANT_GID_PREFIX = "gid://shopify/ProductVariant/"
DEFAULT_VARIANT_TITLE = "Default Title"
ACTIVE_STATUS = "active"


def product_gid(rest_id: int | str) -> str:
    return f"{PRODUCT_GID_PREFIX}{rest_id}"


def variant_gid(rest_id: int | str) -> str:
    return f"{VARIANT_GID_PREFIX}{rest_id}"


def variant_display_name(values: Iterable[str | None]) -> str:
    """Join option values with `` / ``; Shopify's placeholder title is dropped."""

    return " / ".join(value for value in values if value and value != DEFAULT_VARIANT_TITLE)


def parse_inventory_policy(value: str | None) -> InventoryPolicy:
    if value is not None and value.lower() == InventoryPolicy.CONTINUE:
        return InventoryPolicy.CONTINUE
    return InventoryPolicy.DENY


def parse_weight_unit(value: str | None) -> WeightUnit | None:
    if not value:
        return None
    normalized = value.lower()
    aliases = {"kilograms": "kg", "grams": "g", "pounds": "lb", "ounces": "oz"}
    try:
        return WeightUnit(aliases.get(normalized, normalized))
    except ValueError:
        log.warning("Ignoring unknown weight unit %r", value)
        return None


def translate_product_node(node: ProductNode, *, currency: str | None = None) -> UpstreamProduct:
    """Build an ``UpstreamProduct`` from one GraphQL ``products`` node."""

    image_url = node.images.edges[0].node.url if node.images.edges else None
    variants = tuple(translate_variant_node(edge.node) for edge in node.variants.edges)
    return UpstreamProduct(
        external_id=node.id,
        name=node.title,
        description=node.description_html,
        image_url=image_url,
        active=node.status.lower() == ACTIVE_STATUS,
        currency=currency,
        variants=variants,
    )


def translate_variant_node(node: VariantNode) -> UpstreamVariant:
    options = tuple((option.name, option.value) for option in node.selected_options)
    return UpstreamVariant(
        external_id=node.id,
        name=variant_display_name(value for _, value in options),
        price=node.price,
        sku=node.sku,
        barcode=node.barcode,
        compare_at_price=node.compare_at_price,
        inventory_quantity=node.inventory_quantity or 0,
        inventory_policy=parse_inventory_policy(node.inventory_policy),
        options=options,
        image_url=node.image.url if node.image else None,
        weight=node.weight,
        weight_unit=parse_weight_unit(node.weight_unit),
        requires_shipping=node.requires_shipping,
        position=node.position,
    )


def translate_webhook_product(payload: WebhookProduct) -> UpstreamProduct:
    """Build an ``UpstreamProduct`` from a REST ``products/*`` webhook body."""

    option_names = {option.position: option.name for option in payload.options}
    images_by_id = {image.id: image.src for image in payload.images if image.id is not None}
    variants = tuple(
        translate_webhook_variant(variant, option_names=option_names, images_by_id=images_by_id)
        for variant in payload.variants
    )
    return UpstreamProduct(
        external_id=product_gid(payload.id),
        name=payload.title,
        description=payload.body_html,
        image_url=payload.images[0].src if payload.images else None,
        active=payload.status.lower() == ACTIVE_STATUS,
        variants=variants,
    )


def translate_webhook_variant(
    payload: WebhookVariant,
    *,
    option_names: Mapping[int, str],
    images_by_id: Mapping[int, str],
) -> UpstreamVariant:
    values = (payload.option1, payload.option2, payload.option3)
    options = tuple(
        (option_names.get(position, f"Option {position}"), value)
        for position, value in enumerate(values, start=1)
        if value is not None
    )
    return UpstreamVariant(
        external_id=variant_gid(payload.id),
        name=variant_display_name(values),
        price=payload.price,
        sku=payload.sku,
        barcode=payload.barcode,
        compare_at_price=payload.compare_at_price,
        inventory_quantity=payload.inventory_quantity or 0,
        inventory_policy=parse_inventory_policy(payload.inventory_policy),
        options=options,
        image_url=images_by_id.get(payload.image_id) if payload.image_id is not None else None,
        weight=payload.weight,
        weight_unit=parse_weight_unit(payload.weight_unit),
        requires_shipping=payload.requires_shipping,
        position=payload.position,
    )


def parse_webhook(topic: str, payload: object) -> list[WebhookEvent]:
    """Turn a Shopify webhook delivery into domain change events.

    An update that leaves a product non-active removes it locally; a create for a
    non-active product is ignored. Unknown topics yield no events.
    """

    try:
        if topic in {"products/create", "products/update"}:
            product = translate_webhook_product(WebhookProduct.model_validate(payload))
            if product.active:
                return [WebhookEvent.product_upserted(product)]
            if topic == "products/update":
                return [WebhookEvent.product_removed(product.external_id)]
            return []
        if topic == "products/delete":
            deletion = WebhookProductDeletion.model_validate(payload)
            return [WebhookEvent.product_removed(product_gid(deletion.id))]
    except ValidationError as exc:
        raise CatalogValidationError(f"Invalid payload for {topic}: {exc}") from exc

    log.info("Ignoring unsupported Shopify webhook topic %s", topic)
    return []
