"""
Paginated Shopify Admin GraphQL client

Every failure surfaces as a typed ShopifyAPIError. Nothing is retried here:
a page that failed half-way must not advance the cursor, so retry policy
belongs to whoever owns the cursor.
"""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from shopwoo.core.config.settings import settings
from shopwoo.core.exceptions import (
    ShopifyAuthenticationError,
    ShopifyGraphQLError,
    ShopifyHTTPError,
    ShopifyMalformedResponseError,
    ValidationError,
)
from shopwoo.core.logging import get_logger
from shopwoo.shared.constants.importer import (
    BATCH_SIZE_DEFAULTS,
    COUNT_BATCH_SIZE_DEFAULTS,
    MAX_COUNT_ITEMS,
    MAX_IMPORT_ITEMS,
)
from shopwoo.shared.decorators import async_timing
from shopwoo.shared.helpers import excerpt
from ..interfaces.api_client import IHttpTransport, IShopifyGraphQLClient
from ..models import CountResult, ImportFilters, PageResult
from ..normalization import flatten_connection, normalize_records
from .filters import build_search_query
from .queries import count_query, page_query, validate_resource_type

logger = get_logger(__name__)


def normalize_shop_domain(shop_domain: str) -> str:
    """Reduce any store reference to its bare myshopify handle"""
    value = (shop_domain or "").strip().lower()
    if "://" not in value:
        value = "https://" + value
    host = urlparse(value).hostname or ""
    handle = host.replace(".myshopify.com", "")
    if not handle:
        raise ValidationError(
            "Shop domain is empty", field="shop_domain", value=shop_domain
        )
    return handle


def build_graphql_endpoint(shop_domain: str, api_version: Optional[str] = None) -> str:
    """Admin GraphQL endpoint for a store"""
    version = api_version or settings.shopify.SHOPIFY_API_VERSION
    return (
        f"https://{normalize_shop_domain(shop_domain)}.myshopify.com"
        f"/admin/api/{version}/graphql.json"
    )


def format_graphql_errors(errors: Any) -> str:
    """`message (line L, column C)` entries joined with '; '"""
    if not isinstance(errors, list):
        return str(errors)

    messages = []
    for error in errors:
        if not isinstance(error, dict):
            messages.append(str(error))
            continue
        message = error.get("message", "Unknown error")
        locations = error.get("locations") or []
        if locations and isinstance(locations[0], dict):
            loc = locations[0]
            message += f" (line {loc.get('line')}, column {loc.get('column')})"
        messages.append(message)
    return "; ".join(messages)


class ShopifyGraphQLClient(IShopifyGraphQLClient):
    """GraphQL reads for one store through an injected transport"""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        transport: IHttpTransport,
        api_version: Optional[str] = None,
        settings_service=None,
    ):
        self.shop_domain = shop_domain
        self.endpoint = build_graphql_endpoint(shop_domain, api_version)
        self.access_token = access_token
        self.transport = transport
        self.settings_service = settings_service
        self.max_page_size = settings.shopify.SHOPIFY_MAX_PAGE_SIZE

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Shopify-Access-Token": self.access_token,
        }

    async def _page_size(self, resource_type: str, requested: Optional[int]) -> int:
        if requested is None:
            if self.settings_service is not None:
                requested = await self.settings_service.get_batch_size(resource_type)
            else:
                requested = BATCH_SIZE_DEFAULTS.get(resource_type, MAX_IMPORT_ITEMS)
        return max(1, min(int(requested), self.max_page_size))

    async def _count_page_size(self, resource_type: str) -> int:
        if self.settings_service is not None:
            size = await self.settings_service.get_count_batch_size(resource_type)
        else:
            size = COUNT_BATCH_SIZE_DEFAULTS.get(resource_type, MAX_COUNT_ITEMS)
        return max(1, min(int(size), self.max_page_size))

    async def execute_query(
        self, query: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """POST one GraphQL document and return its `data` object"""
        body = json.dumps({"query": query, "variables": variables or {}})
        response = await self.transport.send(
            self.endpoint, "POST", self._get_headers(), body
        )
        body_excerpt = excerpt(response.body)

        if response.status in (401, 403):
            logger.error(
                "Shopify rejected credentials",
                shop_domain=self.shop_domain,
                status=response.status,
                body_excerpt=body_excerpt,
            )
            raise ShopifyAuthenticationError(
                f"Authorization failed: Shopify rejected the access token "
                f"(HTTP {response.status})",
                status=response.status,
                body_excerpt=body_excerpt,
            )

        if not 200 <= response.status < 300:
            logger.error(
                "Shopify GraphQL request failed",
                shop_domain=self.shop_domain,
                status=response.status,
                body_excerpt=body_excerpt,
            )
            raise ShopifyHTTPError(
                f"GraphQL API request failed with status {response.status}: "
                f"{body_excerpt}",
                status=response.status,
                body_excerpt=body_excerpt,
            )

        try:
            payload = json.loads(response.body)
        except (TypeError, ValueError) as e:
            logger.error(
                "Shopify returned a non-JSON body",
                shop_domain=self.shop_domain,
                body_excerpt=body_excerpt,
            )
            raise ShopifyMalformedResponseError(
                "Invalid JSON response from Shopify API",
                body_excerpt=body_excerpt,
                cause=e,
            )

        if not isinstance(payload, dict):
            raise ShopifyMalformedResponseError(
                "Unexpected response shape from Shopify API",
                body_excerpt=body_excerpt,
            )

        if payload.get("errors"):
            message = format_graphql_errors(payload["errors"])
            logger.error(
                "Shopify GraphQL errors",
                shop_domain=self.shop_domain,
                errors=message,
            )
            raise ShopifyGraphQLError(
                f"GraphQL query failed: {message}",
                errors=payload["errors"] if isinstance(payload["errors"], list) else None,
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            raise ShopifyMalformedResponseError(
                "Shopify response has no data object",
                body_excerpt=body_excerpt,
            )
        return data

    def _connection(self, data: Dict[str, Any], resource_type: str) -> Dict[str, Any]:
        connection = data.get(resource_type)
        if not isinstance(connection, dict):
            raise ShopifyMalformedResponseError(
                f"Shopify response is missing the '{resource_type}' connection",
                body_excerpt=excerpt(json.dumps(data, default=str)),
            )
        return connection

    @async_timing(threshold_ms=10000)
    async def fetch_page(
        self,
        resource_type: str,
        filters: Optional[ImportFilters] = None,
        page_size: Optional[int] = None,
        after_cursor: Optional[str] = None,
    ) -> PageResult:
        validate_resource_type(resource_type)
        first = await self._page_size(resource_type, page_size)
        variables = {
            "first": first,
            "after": after_cursor,
            "query": build_search_query(resource_type, filters),
        }

        data = await self.execute_query(page_query(resource_type), variables)
        connection = self._connection(data, resource_type)
        page_info = connection.get("pageInfo") or {}

        page = PageResult(
            records=normalize_records(resource_type, connection),
            has_next_page=bool(page_info.get("hasNextPage")),
            end_cursor=page_info.get("endCursor"),
        )
        logger.debug(
            "Fetched page",
            shop_domain=self.shop_domain,
            resource_type=resource_type,
            records=len(page),
            has_next_page=page.has_next_page,
        )
        return page

    async def fetch_all(
        self,
        resource_type: str,
        filters: Optional[ImportFilters] = None,
        page_size: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        while True:
            page = await self.fetch_page(resource_type, filters, page_size, cursor)
            records.extend(page.records)

            if not page.has_next_page or not page.end_cursor:
                break
            if page.end_cursor == cursor:
                logger.warning(
                    "Pagination returned a repeated cursor, stopping",
                    shop_domain=self.shop_domain,
                    resource_type=resource_type,
                )
                break
            cursor = page.end_cursor

        return records

    async def count(
        self, resource_type: str, filters: Optional[ImportFilters] = None
    ) -> CountResult:
        validate_resource_type(resource_type)
        first = await self._count_page_size(resource_type)
        variables = {
            "first": first,
            "query": build_search_query(resource_type, filters),
        }

        data = await self.execute_query(count_query(resource_type), variables)
        connection = self._connection(data, resource_type)
        page_info = connection.get("pageInfo") or {}

        result = CountResult(
            count=len(flatten_connection(connection)),
            is_partial=bool(page_info.get("hasNextPage")),
        )
        logger.info(
            "Counted records",
            shop_domain=self.shop_domain,
            resource_type=resource_type,
            count=result.count,
            is_partial=result.is_partial,
        )
        return result


class ShopifyClientFactory:
    """Builds a per-store client sharing one transport"""

    def __init__(self, transport: IHttpTransport, settings_service=None):
        self.transport = transport
        self.settings_service = settings_service

    def __call__(self, shop) -> ShopifyGraphQLClient:
        return ShopifyGraphQLClient(
            shop_domain=shop.shop_domain,
            access_token=shop.access_token,
            transport=self.transport,
            api_version=shop.api_version,
            settings_service=self.settings_service,
        )
