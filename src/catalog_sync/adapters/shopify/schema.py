"""Pydantic models describing the Shopify Admin API payloads."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ShopifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# GraphQL products listing


class ImageNode(ShopifyBaseModel):
    url: str


class ImageEdge(ShopifyBaseModel):
    node: ImageNode


class ImageConnection(ShopifyBaseModel):
    edges: list[ImageEdge] = Field(default_factory=list)


class SelectedOption(ShopifyBaseModel):
    name: str
    value: str


class ProductOption(ShopifyBaseModel):
    name: str
    position: int = 1
    values: list[str] = Field(default_factory=list)


class VariantNode(ShopifyBaseModel):
    id: str
    title: str | None = None
    price: Decimal
    compare_at_price: Decimal | None = Field(default=None, alias="compareAtPrice")
    sku: str | None = None
    barcode: str | None = None
    inventory_quantity: int | None = Field(default=None, alias="inventoryQuantity")
    inventory_policy: str | None = Field(default=None, alias="inventoryPolicy")
    selected_options: list[SelectedOption] = Field(default_factory=list, alias="selectedOptions")
    image: ImageNode | None = None
    weight: float | None = None
    weight_unit: str | None = Field(default=None, alias="weightUnit")
    requires_shipping: bool | None = Field(default=None, alias="requiresShipping")
    position: int = 1

    _normalize_codes = field_validator("sku", "barcode", mode="before")(_blank_to_none)


class VariantEdge(ShopifyBaseModel):
    node: VariantNode


class PageInfo(ShopifyBaseModel):
    has_next_page: bool = Field(default=False, alias="hasNextPage")
    end_cursor: str | None = Field(default=None, alias="endCursor")


class VariantConnection(ShopifyBaseModel):
    edges: list[VariantEdge] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo, alias="pageInfo")


class ProductNode(ShopifyBaseModel):
    id: str
    title: str
    description_html: str | None = Field(default=None, alias="descriptionHtml")
    status: str
    images: ImageConnection = Field(default_factory=ImageConnection)
    options: list[ProductOption] = Field(default_factory=list)
    variants: VariantConnection = Field(default_factory=VariantConnection)

    _normalize_description = field_validator("description_html", mode="before")(_blank_to_none)


class ProductEdge(ShopifyBaseModel):
    cursor: str | None = None
    node: ProductNode


class ProductConnection(ShopifyBaseModel):
    edges: list[ProductEdge] = Field(default_factory=list)
    page_info: PageInfo = Field(alias="pageInfo")


class ShopNode(ShopifyBaseModel):
    currency_code: str | None = Field(default=None, alias="currencyCode")


class ProductsData(ShopifyBaseModel):
    products: ProductConnection
    shop: ShopNode | None = None


class GraphQLError(ShopifyBaseModel):
    message: str


class ProductsQueryResponse(ShopifyBaseModel):
    data: ProductsData | None = None
    errors: list[GraphQLError] | None = None


class ProductVariantsNode(ShopifyBaseModel):
    variants: VariantConnection = Field(default_factory=VariantConnection)


class ProductVariantsData(ShopifyBaseModel):
    product: ProductVariantsNode | None = None


class ProductVariantsResponse(ShopifyBaseModel):
    data: ProductVariantsData | None = None
    errors: list[GraphQLError] | None = None


# REST webhook payloads


class WebhookImage(ShopifyBaseModel):
    id: int | None = None
    src: str
    position: int | None = None


class WebhookVariant(ShopifyBaseModel):
    id: int
    title: str | None = None
    price: Decimal
    compare_at_price: Decimal | None = None
    sku: str | None = None
    barcode: str | None = None
    inventory_quantity: int | None = None
    inventory_policy: str | None = None
    option1: str | None = None
    option2: str | None = None
    option3: str | None = None
    image_id: int | None = None
    weight: float | None = None
    weight_unit: str | None = None
    requires_shipping: bool | None = None
    position: int = 1

    _normalize_codes = field_validator("sku", "barcode", mode="before")(_blank_to_none)
    _normalize_compare_at = field_validator("compare_at_price", mode="before")(_blank_to_none)


class WebhookProduct(ShopifyBaseModel):
    id: int
    title: str
    body_html: str | None = None
    status: str = "active"
    images: list[WebhookImage] = Field(default_factory=list)
    options: list[ProductOption] = Field(default_factory=list)
    variants: list[WebhookVariant] = Field(default_factory=list)

    _normalize_description = field_validator("body_html", mode="before")(_blank_to_none)


class WebhookProductDeletion(ShopifyBaseModel):
    id: int


# REST webhook subscriptions and OAuth


class WebhookSubscription(ShopifyBaseModel):
    id: int
    topic: str
    address: str


class WebhookSubscriptionList(ShopifyBaseModel):
    webhooks: list[WebhookSubscription] = Field(default_factory=list)


class WebhookSubscriptionEnvelope(ShopifyBaseModel):
    webhook: WebhookSubscription


class AccessTokenResponse(ShopifyBaseModel):
    access_token: str
    scope: str = ""

    @property
    def scopes(self) -> list[str]:
        return [scope.strip() for scope in self.scope.split(",") if scope.strip()]
