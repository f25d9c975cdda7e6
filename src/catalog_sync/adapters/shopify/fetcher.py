"""Catalog fetcher paging through the Shopify products listing."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalog_sync.domain.ports import CatalogPage

from .client import ShopifyAPIError
from .schema import VariantConnection
from .translator import translate_product_node

if TYPE_CHECKING:
    from collections.abc import Iterator

    from catalog_sync.domain.ports import CatalogFetcher

    from .client import ShopifyClient
    from .schema import ProductNode

log = getLogger(__name__)


@dataclass(slots=True)
class ShopifyCatalogFetcher:
    """Yield catalog pages lazily; the next page is requested only when consumed."""

    client: ShopifyClient

    def __call__(self, *, page_size: int = 50) -> Iterator[CatalogPage]:
        cursor: str | None = None
        page_number = 0
        while True:
            data = self.client.fetch_products_page(first=page_size, after=cursor)
            page_number += 1
            currency = data.shop.currency_code if data.shop else None
            products = [
                translate_product_node(self._with_all_variants(edge.node), currency=currency)
                for edge in data.products.edges
            ]
            log.debug("Fetched Shopify page %s with %s products", page_number, len(products))
            page_info = data.products.page_info
            yield CatalogPage(products=products, cursor=page_info.end_cursor)
            if not page_info.has_next_page or page_info.end_cursor is None:
                break
            cursor = page_info.end_cursor

    def _with_all_variants(self, node: ProductNode) -> ProductNode:
        """Return ``node`` with the variants past the first listing page appended."""

        variants = node.variants
        page_info = variants.page_info
        if not page_info.has_next_page:
            return node
        edges = list(variants.edges)
        while page_info.has_next_page:
            if page_info.end_cursor is None:
                raise ShopifyAPIError(f"Shopify listed more variants for {node.id} without cursor")
            more = self.client.fetch_product_variants(node.id, after=page_info.end_cursor)
            edges.extend(more.edges)
            page_info = more.page_info
        log.debug("Fetched %s variants for Shopify product %s", len(edges), node.id)
        return node.model_copy(
            update={"variants": VariantConnection(edges=edges, page_info=page_info)}
        )


if TYPE_CHECKING:

    def _fetcher_check(fetcher: ShopifyCatalogFetcher) -> CatalogFetcher:
        return fetcher
