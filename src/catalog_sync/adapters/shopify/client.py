"""HTTP client for the Shopify Admin API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ValidationError

from catalog_sync.adapters.http_resilience import ResilientClient
from catalog_sync.config.http_resilience import (
    RETRYABLE_METHODS,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
)
from catalog_sync.config.shopify import DEFAULT_API_VERSION
from catalog_sync.domain.ports import UpstreamError

from .schema import (
    AccessTokenResponse,
    ProductsData,
    ProductsQueryResponse,
    ProductVariantsResponse,
    VariantConnection,
    WebhookSubscription,
    WebhookSubscriptionEnvelope,
    WebhookSubscriptionList,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Mapping

log = getLogger(__name__)

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"
VARIANT_PAGE_SIZE = 100
_DEFAULT_TIMEOUT_SECONDS = 30.0

VARIANT_FIELDS = """
fragment VariantFields on ProductVariant {
  id
  title
  price
  compareAtPrice
  sku
  barcode
  inventoryQuantity
  inventoryPolicy
  selectedOptions {
    name
    value
  }
  image {
    url
  }
  weight
  weightUnit
  requiresShipping
  position
}
"""

PRODUCTS_QUERY = (
    """
query GetProducts($first: Int!, $after: String, $variantsFirst: Int!) {
  shop {
    currencyCode
  }
  products(first: $first, after: $after) {
    edges {
      cursor
      node {
        id
        title
        descriptionHtml
        status
        images(first: 1) {
          edges {
            node {
              url
            }
          }
        }
        options {
          name
          position
          values
        }
        variants(first: $variantsFirst) {
          edges {
            node {
              ...VariantFields
            }
          }
          pageInfo {
            hasNextPage
            endCursor
          }
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""
    + VARIANT_FIELDS
)

PRODUCT_VARIANTS_QUERY = (
    """
query GetProductVariants($id: ID!, $first: Int!, $after: String) {
  product(id: $id) {
    variants(first: $first, after: $after) {
      edges {
        node {
          ...VariantFields
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
  }
}
"""
    + VARIANT_FIELDS
)

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]


class ShopifyAPIError(UpstreamError):
    """Raised when Shopify rejects a request or returns an unusable response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def admin_base_url(shop: str, api_version: str = DEFAULT_API_VERSION) -> str:
    return f"https://{shop}/admin/api/{api_version}/"


def default_resilience_config(shop: str, api_version: str = DEFAULT_API_VERSION) -> ResilienceConfig:
    # Shopify's REST bucket leaks two calls per second. GraphQL reads go out as
    # POST and are safe to repeat; webhook creation opts out per request.
    return ResilienceConfig(
        name="shopify",
        base_url=admin_base_url(shop, api_version),
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        retry=RetryPolicy(allowed_methods=RETRYABLE_METHODS | {"POST"}),
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        default_headers={"Content-Type": "application/json"},
    )


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _decode_json(response: httpx.Response, what: str) -> object:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        content_type = response.headers.get("Content-Type", "unknown content type")
        raise ShopifyAPIError(
            f"{what} returned a non-JSON body ({content_type})",
            status_code=response.status_code,
        ) from exc


def _validate[M: BaseModel](model: type[M], payload: object, what: str) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ShopifyAPIError(f"Unexpected {what} payload: {exc}") from exc


@dataclass(slots=True)
class ShopifyClient:
    """Synchronous facade over the async Admin API calls for one shop.

    Every call goes through one resilient client, and so one rate limiter, driven on
    a private event loop. Both are created on first use; ``close()`` or leaving a
    ``with`` block releases them.
    """

    shop: str
    access_token: str
    api_version: str = DEFAULT_API_VERSION
    resilience: ResilienceConfig | None = None
    client_factory: ClientFactory = field(default=_default_client_factory)
    _loop: asyncio.AbstractEventLoop | None = field(default=None, init=False, repr=False)
    _http: ResilientClient | None = field(default=None, init=False, repr=False)

    def __enter__(self) -> ShopifyClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        loop = self._loop
        if loop is None:
            return
        try:
            if self._http is not None:
                loop.run_until_complete(self._http.aclose())
        finally:
            self._http = None
            self._loop = None
            loop.close()

    def fetch_products_page(self, *, first: int, after: str | None = None) -> ProductsData:
        return self._run(self._fetch_products_page_async(first=first, after=after))

    def fetch_product_variants(
        self,
        product_id: str,
        *,
        first: int = VARIANT_PAGE_SIZE,
        after: str | None = None,
    ) -> VariantConnection:
        return self._run(self._fetch_product_variants_async(product_id, first=first, after=after))

    def list_webhooks(self) -> list[WebhookSubscription]:
        return self._run(self._list_webhooks_async())

    def create_webhook(self, *, topic: str, address: str) -> WebhookSubscription:
        return self._run(self._create_webhook_async(topic=topic, address=address))

    def delete_webhook(self, webhook_id: str) -> None:
        self._run(self._delete_webhook_async(webhook_id))

    def revoke_access_token(self) -> None:
        self._run(self._revoke_access_token_async())

    def _run[T](self, call: Coroutine[Any, Any, T]) -> T:
        if self._loop is None:
            self._loop = asyncio.new_event_loop()
        return self._loop.run_until_complete(call)

    async def _fetch_products_page_async(self, *, first: int, after: str | None) -> ProductsData:
        variables = {"first": first, "after": after, "variantsFirst": VARIANT_PAGE_SIZE}
        response = await self._graphql(PRODUCTS_QUERY, variables, ProductsQueryResponse)
        if response.data is None:
            raise ShopifyAPIError("No data returned from Shopify")
        return response.data

    async def _fetch_product_variants_async(
        self, product_id: str, *, first: int, after: str | None
    ) -> VariantConnection:
        variables = {"id": product_id, "first": first, "after": after}
        response = await self._graphql(PRODUCT_VARIANTS_QUERY, variables, ProductVariantsResponse)
        if response.data is None or response.data.product is None:
            raise ShopifyAPIError(f"Product {product_id} disappeared while listing its variants")
        return response.data.product.variants

    async def _graphql[R: ProductsQueryResponse | ProductVariantsResponse](
        self, query: str, variables: Mapping[str, object], model: type[R]
    ) -> R:
        payload = await self._perform_request(
            "POST", "graphql.json", json={"query": query, "variables": variables}
        )
        response = _validate(model, payload, "Shopify GraphQL")
        if response.errors:
            message = "; ".join(error.message for error in response.errors)
            log.error(f"Shopify GraphQL error: {message}")
            raise ShopifyAPIError(message)
        return response

    async def _list_webhooks_async(self) -> list[WebhookSubscription]:
        payload = await self._perform_request("GET", "webhooks.json")
        return _validate(WebhookSubscriptionList, payload, "Shopify webhook list").webhooks

    async def _create_webhook_async(self, *, topic: str, address: str) -> WebhookSubscription:
        body = {"webhook": {"topic": topic, "address": address, "format": "json"}}
        payload = await self._perform_request("POST", "webhooks.json", json=body, retry=False)
        return _validate(WebhookSubscriptionEnvelope, payload, "Shopify webhook").webhook

    async def _delete_webhook_async(self, webhook_id: str) -> None:
        await self._perform_request("DELETE", f"webhooks/{webhook_id}.json")

    async def _revoke_access_token_async(self) -> None:
        await self._perform_request("DELETE", "access_tokens/current.json")

    async def _perform_request(
        self,
        method: str,
        path: str,
        *,
        json: Mapping[str, object] | None = None,
        retry: bool = True,
    ) -> object:
        if self._http is None:
            # built inside the loop so the async client binds to it
            config = self.resilience or default_resilience_config(self.shop, self.api_version)
            self._http = self.client_factory(config)
        headers = {ACCESS_TOKEN_HEADER: self.access_token}
        try:
            response = await self._http.request(
                method, path, json=json, headers=headers, retry=retry
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.error(f"Shopify API error {status} for {method} {path}")
            raise ShopifyAPIError(
                f"Shopify API error {status}: {exc.response.reason_phrase}",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            raise ShopifyAPIError(f"Shopify request failed: {exc}") from exc
        return _decode_json(response, f"Shopify {method} {path}")


def exchange_code(
    *,
    shop: str,
    code: str,
    api_key: str,
    api_secret: str,
    client_factory: ClientFactory = _default_client_factory,
) -> AccessTokenResponse:
    """Trade an OAuth authorization code for a permanent access token.

    The code is single use, so the exchange is never retried.
    """

    return asyncio.run(
        _exchange_code_async(
            shop=shop,
            code=code,
            api_key=api_key,
            api_secret=api_secret,
            client_factory=client_factory,
        )
    )


async def _exchange_code_async(
    *,
    shop: str,
    code: str,
    api_key: str,
    api_secret: str,
    client_factory: ClientFactory,
) -> AccessTokenResponse:
    config = ResilienceConfig(name="shopify-oauth", timeout_seconds=_DEFAULT_TIMEOUT_SECONDS)
    body: Mapping[str, str] = {"client_id": api_key, "client_secret": api_secret, "code": code}
    async with client_factory(config) as client:
        try:
            response = await client.post(
                f"https://{shop}/admin/oauth/access_token", json=body, retry=False
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ShopifyAPIError(
                f"Token exchange failed: {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ShopifyAPIError(f"Token exchange failed: {exc}") from exc
    payload = _decode_json(response, "Token exchange")
    return _validate(AccessTokenResponse, payload, "token response")
