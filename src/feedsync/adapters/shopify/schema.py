"""Pydantic models describing Shopify Admin GraphQL payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ShopifyModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GraphQLErrorExtensions(ShopifyModel):
    code: str | None = None


class GraphQLError(ShopifyModel):
    message: str
    extensions: GraphQLErrorExtensions | None = None

    @property
    def code(self) -> str | None:
        return self.extensions.code if self.extensions else None


class GraphQLResponse(ShopifyModel):
    data: dict[str, Any] | None = None
    errors: list[GraphQLError] = Field(default_factory=list)


class UserError(ShopifyModel):
    field: list[str] | None = None
    message: str
    code: str | None = None


class PageInfo(ShopifyModel):
    has_next_page: bool = Field(alias="hasNextPage")
    end_cursor: str | None = Field(default=None, alias="endCursor")


class SelectedOption(ShopifyModel):
    name: str
    value: str


class ImageUrl(ShopifyModel):
    url: str | None = None


class MediaPreview(ShopifyModel):
    image: ImageUrl | None = None


class MediaNode(ShopifyModel):
    id: str
    alt: str | None = None
    status: str | None = None
    media_content_type: str | None = Field(default=None, alias="mediaContentType")
    preview: MediaPreview | None = None


class MediaConnection(ShopifyModel):
    nodes: list[MediaNode] = Field(default_factory=list)


class IdNode(ShopifyModel):
    id: str


class VariantMediaConnection(ShopifyModel):
    nodes: list[IdNode] = Field(default_factory=list)


class VariantNode(ShopifyModel):
    id: str
    sku: str | None = None
    barcode: str | None = None
    price: str | None = None
    selected_options: list[SelectedOption] = Field(default_factory=list, alias="selectedOptions")
    media: VariantMediaConnection | None = None


class VariantConnection(ShopifyModel):
    nodes: list[VariantNode] = Field(default_factory=list)
    page_info: PageInfo | None = Field(default=None, alias="pageInfo")


class ProductNode(ShopifyModel):
    id: str
    title: str
    handle: str = ""
    tags: list[str] = Field(default_factory=list)
    variants: VariantConnection | None = None
    media: MediaConnection | None = None


class ProductConnection(ShopifyModel):
    nodes: list[ProductNode] = Field(default_factory=list)


class SearchProductsData(ShopifyModel):
    products: ProductConnection


class ProductCreatePayload(ShopifyModel):
    product: ProductNode | None = None
    user_errors: list[UserError] = Field(default_factory=list, alias="userErrors")


class ProductCreateData(ShopifyModel):
    product_create: ProductCreatePayload = Field(alias="productCreate")


class ProductCreateMediaPayload(ShopifyModel):
    media: list[MediaNode] | None = None
    media_user_errors: list[UserError] = Field(default_factory=list, alias="mediaUserErrors")


class ProductCreateMediaData(ShopifyModel):
    product_create_media: ProductCreateMediaPayload = Field(alias="productCreateMedia")


class ProductWithMedia(ShopifyModel):
    media: MediaConnection


class ProductMediaData(ShopifyModel):
    product: ProductWithMedia | None = None


class ProductWithVariants(ShopifyModel):
    variants: VariantConnection


class ProductVariantsData(ShopifyModel):
    product: ProductWithVariants | None = None


class VariantsBulkPayload(ShopifyModel):
    product_variants: list[VariantNode] | None = Field(default=None, alias="productVariants")
    user_errors: list[UserError] = Field(default_factory=list, alias="userErrors")


class VariantsBulkCreateData(ShopifyModel):
    payload: VariantsBulkPayload = Field(alias="productVariantsBulkCreate")


class VariantsBulkUpdateData(ShopifyModel):
    payload: VariantsBulkPayload = Field(alias="productVariantsBulkUpdate")


class Publication(ShopifyModel):
    id: str
    name: str


class PublicationConnection(ShopifyModel):
    nodes: list[Publication] = Field(default_factory=list)


class PublicationsData(ShopifyModel):
    publications: PublicationConnection


class PublishPayload(ShopifyModel):
    user_errors: list[UserError] = Field(default_factory=list, alias="userErrors")


class PublishData(ShopifyModel):
    publishable_publish: PublishPayload = Field(alias="publishablePublish")


class OptionsNode(ShopifyModel):
    selected_options: list[SelectedOption] = Field(default_factory=list, alias="selectedOptions")


class OptionsConnection(ShopifyModel):
    nodes: list[OptionsNode] = Field(default_factory=list)
    page_info: PageInfo | None = Field(default=None, alias="pageInfo")


class VariantOptionsData(ShopifyModel):
    product_variants: OptionsConnection = Field(alias="productVariants")
