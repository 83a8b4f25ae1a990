"""Catalog client backed by the Shopify Admin GraphQL API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ValidationError

from feedsync.adapters.http_resilience import ResilientClient
from feedsync.config.shopify import GRAPHQL_PATH
from feedsync.domain.errors import (
    CatalogError,
    CatalogNotFoundError,
    CatalogThrottledError,
    CatalogUnavailableError,
    CatalogValidationError,
)
from feedsync.domain.model import BulkVariantsResult
from feedsync.domain.ports import CatalogClient

from . import queries
from .schema import (
    GraphQLResponse,
    ProductCreateData,
    ProductCreateMediaData,
    ProductMediaData,
    ProductVariantsData,
    PublicationsData,
    PublishData,
    SearchProductsData,
    VariantOptionsData,
    VariantsBulkCreateData,
    VariantsBulkPayload,
    VariantsBulkUpdateData,
)
from .translator import (
    media_inputs,
    product_create_input,
    to_channel,
    to_media_ref,
    to_remote_product,
    to_remote_variant,
    to_variant_error,
    variant_bulk_inputs,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from feedsync.config import ResilienceConfig, ShopifyConfig
    from feedsync.domain.model import (
        Channel,
        MediaRef,
        ProductDraft,
        RemoteProduct,
        RemoteVariant,
        VariantInput,
    )

    from .schema import UserError

log = getLogger(__name__)

SEARCH_PAGE_SIZE = 10
OPTION_PAGE_SIZE = 250
THROTTLED = "THROTTLED"
CREATE_STRATEGY = "REMOVE_STANDALONE_VARIANT"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _user_error_message(errors: Sequence[UserError]) -> str:
    return "; ".join(
        f"{'.'.join(error.field)}: {error.message}" if error.field else error.message
        for error in errors
    )


def _raise_for_user_errors(operation: str, errors: Sequence[UserError]) -> None:
    if errors:
        fields = tuple(".".join(error.field) for error in errors if error.field)
        raise CatalogValidationError(
            f"{operation} rejected: {_user_error_message(errors)}", fields=fields
        )


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


@dataclass(slots=True)
class ShopifyCatalogClient:
    """Implements the catalog port over one shop's GraphQL endpoint.

    Use as an async context manager so a single HTTP client, and its rate
    limiter, is shared by every call of a run.
    """

    config: ShopifyConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False)

    async def __aenter__(self) -> ShopifyCatalogClient:
        self._client = self.client_factory(self.config.resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def search_products(self, query: str) -> list[RemoteProduct]:
        data = await self._execute(
            queries.SEARCH_PRODUCTS,
            {"query": query, "first": SEARCH_PAGE_SIZE},
            SearchProductsData,
        )
        return [to_remote_product(node) for node in data.products.nodes]

    async def create_product(self, draft: ProductDraft) -> RemoteProduct:
        data = await self._execute(
            queries.PRODUCT_CREATE,
            {"product": product_create_input(draft)},
            ProductCreateData,
        )
        payload = data.product_create
        _raise_for_user_errors("productCreate", payload.user_errors)
        if payload.product is None:
            raise CatalogError("productCreate returned no product")
        return to_remote_product(payload.product)

    async def create_media(self, product_id: str, urls: Sequence[str]) -> list[MediaRef]:
        data = await self._execute(
            queries.PRODUCT_CREATE_MEDIA,
            {"productId": product_id, "media": media_inputs(urls)},
            ProductCreateMediaData,
        )
        payload = data.product_create_media
        created = [to_media_ref(node) for node in payload.media or ()]
        if payload.media_user_errors:
            if not created:
                _raise_for_user_errors("productCreateMedia", payload.media_user_errors)
            log.warning(
                "Some images of %s were rejected: %s",
                product_id,
                _user_error_message(payload.media_user_errors),
            )
        return created

    async def get_media(self, product_id: str) -> list[MediaRef]:
        data = await self._execute(queries.PRODUCT_MEDIA, {"id": product_id}, ProductMediaData)
        if data.product is None:
            raise CatalogNotFoundError(f"Product {product_id} not found")
        return [to_media_ref(node) for node in data.product.media.nodes]

    async def bulk_create_variants(
        self, product_id: str, variants: Sequence[VariantInput]
    ) -> BulkVariantsResult:
        data = await self._execute(
            queries.VARIANTS_BULK_CREATE,
            {
                "productId": product_id,
                "variants": variant_bulk_inputs(variants),
                "strategy": CREATE_STRATEGY,
            },
            VariantsBulkCreateData,
        )
        return self._bulk_result(data.payload)

    async def bulk_update_variants(
        self, product_id: str, variants: Sequence[VariantInput]
    ) -> BulkVariantsResult:
        data = await self._execute(
            queries.VARIANTS_BULK_UPDATE,
            {"productId": product_id, "variants": variant_bulk_inputs(variants)},
            VariantsBulkUpdateData,
        )
        return self._bulk_result(data.payload)

    async def get_variants(self, product_id: str) -> list[RemoteVariant]:
        variants: list[RemoteVariant] = []
        after: str | None = None
        while True:
            data = await self._execute(
                queries.PRODUCT_VARIANTS,
                {"id": product_id, "after": after},
                ProductVariantsData,
            )
            if data.product is None:
                raise CatalogNotFoundError(f"Product {product_id} not found")
            connection = data.product.variants
            variants.extend(to_remote_variant(node) for node in connection.nodes)
            page = connection.page_info
            if page is None or not page.has_next_page or not page.end_cursor:
                return variants
            after = page.end_cursor

    async def list_publication_channels(self) -> list[Channel]:
        data = await self._execute(queries.PUBLICATIONS, {}, PublicationsData)
        return [to_channel(node) for node in data.publications.nodes]

    async def publish(self, product_id: str, channel_ids: Sequence[str]) -> None:
        data = await self._execute(
            queries.PUBLISHABLE_PUBLISH,
            {
                "id": product_id,
                "input": [{"publicationId": channel_id} for channel_id in channel_ids],
            },
            PublishData,
        )
        _raise_for_user_errors("publishablePublish", data.publishable_publish.user_errors)

    async def option_values_page(
        self, after: str | None = None, *, page_size: int = OPTION_PAGE_SIZE
    ) -> VariantOptionsData:
        return await self._execute(
            queries.VARIANT_OPTIONS, {"first": page_size, "after": after}, VariantOptionsData
        )

    @staticmethod
    def _bulk_result(payload: VariantsBulkPayload) -> BulkVariantsResult:
        return BulkVariantsResult(
            variants=tuple(to_remote_variant(node) for node in payload.product_variants or ()),
            errors=tuple(to_variant_error(error) for error in payload.user_errors),
        )

    async def _execute[M: BaseModel](
        self, document: str, variables: dict[str, Any], model: type[M]
    ) -> M:
        client = self._client
        if client is None:
            raise RuntimeError("ShopifyCatalogClient must be used as an async context manager")
        try:
            response = await client.post(
                GRAPHQL_PATH, json={"query": document, "variables": variables}
            )
        except httpx.HTTPError as exc:
            raise CatalogUnavailableError(f"Shopify request failed: {exc}") from exc

        self._raise_for_status(response)
        try:
            envelope = GraphQLResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise CatalogError(f"Unexpected Shopify response: {exc}") from exc

        if envelope.errors:
            message = "; ".join(error.message for error in envelope.errors)
            if any(error.code == THROTTLED for error in envelope.errors):
                raise CatalogThrottledError(message)
            raise CatalogValidationError(message)
        if envelope.data is None:
            raise CatalogError("Shopify response carried no data")
        try:
            return model.model_validate(envelope.data)
        except ValidationError as exc:
            raise CatalogError(f"Unexpected Shopify payload: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        status = response.status_code
        if response.is_success:
            return
        if status == httpx.codes.TOO_MANY_REQUESTS:
            raise CatalogThrottledError(retry_after=_retry_after(response))
        if status >= httpx.codes.INTERNAL_SERVER_ERROR:
            raise CatalogUnavailableError(f"Shopify answered HTTP {status}")
        if status == httpx.codes.NOT_FOUND:
            raise CatalogNotFoundError(f"Shopify answered HTTP {status}")
        raise CatalogError(f"Shopify answered HTTP {status}: {response.text[:200]}")


async def collect_option_values(client: ShopifyCatalogClient, option_name: str) -> list[str]:
    """Every distinct value of ``option_name`` across the catalog's variants, sorted."""

    wanted = option_name.casefold()
    values: set[str] = set()
    after: str | None = None
    while True:
        page = (await client.option_values_page(after)).product_variants
        for node in page.nodes:
            values.update(
                option.value.strip()
                for option in node.selected_options
                if option.name.casefold() == wanted and option.value.strip()
            )
        info = page.page_info
        if info is None or not info.has_next_page or not info.end_cursor:
            break
        after = info.end_cursor
    return sorted(values, key=str.casefold)


if TYPE_CHECKING:

    def _client_check(config: ShopifyConfig) -> CatalogClient:
        return ShopifyCatalogClient(config)
