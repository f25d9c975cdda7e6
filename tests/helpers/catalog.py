"""In-memory fakes and builders for catalog reconciliation tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Literal

from catalog_sync.domain.model import Connection, Product, ProductSource, Variant
from catalog_sync.domain.ports import (
    CatalogPage,
    CatalogRepositories,
    UpstreamError,
    UpstreamProduct,
    UpstreamVariant,
)

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable, Iterator, Sequence


@dataclass(slots=True)
class InMemoryCatalogStore:
    """Committed state shared by every unit of work created for one test."""

    connections: list[Connection] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    variants: list[Variant] = field(default_factory=list)
    commits: int = 0

    def unit_of_work(self) -> FakeCatalogUnitOfWork:
        return FakeCatalogUnitOfWork(self)

    def products_for(self, business_id: uuid.UUID) -> list[Product]:
        return [product for product in self.products if product.business_id == business_id]

    def variants_for(self, product: Product) -> list[Variant]:
        return [variant for variant in self.variants if variant.product_id == product.id]

    def product_by_external_id(self, external_product_id: str) -> Product:
        return next(
            product
            for product in self.products
            if product.external_product_id == external_product_id
        )

    def variant_by_external_id(self, external_variant_id: str) -> Variant:
        return next(
            variant
            for variant in self.variants
            if variant.external_variant_id == external_variant_id
        )


class _Staging:
    """Pending inserts and deletes of one unit of work; dropped unless committed."""

    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        self.connections: list[Connection] = []
        self.products: list[Product] = []
        self.variants: list[Variant] = []
        self.removed_connections: list[Connection] = []


class FakeConnectionRepository:
    def __init__(self, store: InMemoryCatalogStore, staging: _Staging) -> None:
        self._store = store
        self._staging = staging

    def _visible(self) -> list[Connection]:
        return [
            connection
            for connection in [*self._store.connections, *self._staging.connections]
            if connection not in self._staging.removed_connections
        ]

    def add(self, entity: Connection) -> None:
        self._staging.connections.append(entity)

    def remove(self, entity: Connection) -> None:
        self._staging.removed_connections.append(entity)

    def get_by_business(self, business_id: uuid.UUID) -> Connection | None:
        return next((c for c in self._visible() if c.business_id == business_id), None)

    def get_by_shop(self, shop: str) -> Connection | None:
        matches = [c for c in self._visible() if c.shop == shop]
        return min(matches, key=lambda c: c.created_at) if matches else None


class FakeProductRepository:
    def __init__(self, store: InMemoryCatalogStore, staging: _Staging) -> None:
        self._store = store
        self._staging = staging

    def _visible(self) -> list[Product]:
        return [*self._store.products, *self._staging.products]

    def add(self, entity: Product) -> None:
        self._staging.products.append(entity)

    def get_by_external_id(self, business_id: uuid.UUID, external_product_id: str) -> Product | None:
        return next(
            (
                product
                for product in self._visible()
                if product.business_id == business_id
                and product.source == ProductSource.SYNCED
                and product.external_product_id == external_product_id
            ),
            None,
        )

    def list_for_business(self, business_id: uuid.UUID) -> Sequence[Product]:
        return [product for product in self._visible() if product.business_id == business_id]

    def list_synced(
        self, business_id: uuid.UUID, *, available_only: bool = False
    ) -> Sequence[Product]:
        return [
            product
            for product in self.list_for_business(business_id)
            if product.source == ProductSource.SYNCED
            and product.external_product_id is not None
            and (product.available or not available_only)
        ]


class FakeVariantRepository:
    def __init__(
        self,
        store: InMemoryCatalogStore,
        staging: _Staging,
        products: FakeProductRepository,
    ) -> None:
        self._store = store
        self._staging = staging
        self._products = products

    def _visible(self) -> list[Variant]:
        return [*self._store.variants, *self._staging.variants]

    def add(self, entity: Variant) -> None:
        self._staging.variants.append(entity)

    def get_by_external_id(self, external_variant_id: str) -> Variant | None:
        return next(
            (v for v in self._visible() if v.external_variant_id == external_variant_id),
            None,
        )

    def list_for_product(self, product_id: uuid.UUID) -> Sequence[Variant]:
        return sorted(
            (v for v in self._visible() if v.product_id == product_id),
            key=lambda variant: variant.position,
        )

    def list_synced_for_business(
        self, business_id: uuid.UUID, *, available_only: bool = False
    ) -> Sequence[Variant]:
        product_ids = {product.id for product in self._products.list_for_business(business_id)}
        return [
            variant
            for variant in self._visible()
            if variant.product_id in product_ids
            and variant.external_variant_id is not None
            and (variant.available or not available_only)
        ]


class FakeCatalogUnitOfWork:
    """Unit of work over an ``InMemoryCatalogStore``.

    Inserts and deletes are staged and only reach the store on ``commit``. Field
    changes on already committed records are applied in place.
    """

    def __init__(self, store: InMemoryCatalogStore) -> None:
        self._store = store
        self._staging = _Staging()
        products = FakeProductRepository(store, self._staging)
        self.repositories = CatalogRepositories(
            connections=FakeConnectionRepository(store, self._staging),
            products=products,
            variants=FakeVariantRepository(store, self._staging, products),
        )
        self.committed = False
        self.rollback_called = False

    def __enter__(self) -> FakeCatalogUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: object | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self._store.connections = [
            connection
            for connection in [*self._store.connections, *self._staging.connections]
            if connection not in self._staging.removed_connections
        ]
        self._store.products.extend(self._staging.products)
        self._store.variants.extend(self._staging.variants)
        self._staging.clear()
        self._store.commits += 1
        self.committed = True

    def rollback(self) -> None:
        self._staging.clear()
        self.rollback_called = True


if TYPE_CHECKING:
    from catalog_sync.domain.ports import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = FakeCatalogUnitOfWork(InMemoryCatalogStore())


class FakeCatalogFetcher:
    """Catalog fetcher replaying fixed pages, optionally failing at one page."""

    def __init__(
        self,
        pages: Iterable[Sequence[UpstreamProduct]],
        *,
        fail_at_page: int | None = None,
    ) -> None:
        self._pages = [list(page) for page in pages]
        self._fail_at_page = fail_at_page
        self.calls: list[dict[str, object]] = []

    def __call__(self, *, page_size: int = 50) -> Iterator[CatalogPage]:
        self.calls.append({"page_size": page_size})
        for index, products in enumerate(self._pages):
            if self._fail_at_page is not None and index == self._fail_at_page:
                raise UpstreamError("listing interrupted")
            yield CatalogPage(products=products, cursor=str(index))


def make_connection(business_id: uuid.UUID, *, shop: str = "demo.myshopify.com") -> Connection:
    return Connection(business_id=business_id, shop=shop, access_token="shpat_test")


def make_variant(
    external_id: str,
    *,
    price: str = "10.00",
    inventory: int = 5,
    name: str = "Default",
    options: tuple[tuple[str, str], ...] = (),
    position: int = 1,
) -> UpstreamVariant:
    return UpstreamVariant(
        external_id=external_id,
        name=name,
        price=Decimal(price),
        inventory_quantity=inventory,
        options=options,
        position=position,
    )


def make_product(
    external_id: str,
    *,
    name: str | None = None,
    variants: Iterable[UpstreamVariant] | None = None,
    active: bool = True,
    currency: str | None = "USD",
    description: str | None = None,
) -> UpstreamProduct:
    return UpstreamProduct(
        external_id=external_id,
        name=name if name is not None else f"Product {external_id}",
        description=description,
        active=active,
        currency=currency,
        variants=tuple(variants) if variants is not None else (make_variant(f"{external_id}-v1"),),
    )
