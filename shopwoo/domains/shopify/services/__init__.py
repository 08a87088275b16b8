"""
Shopify services
"""

from .graphql_client import (
    ShopifyGraphQLClient,
    build_graphql_endpoint,
    normalize_shop_domain,
    format_graphql_errors,
    ShopifyClientFactory,
)
from .transport import HttpxTransport
from .filters import build_search_query, quote_value

__all__ = [
    "ShopifyGraphQLClient",
    "ShopifyClientFactory",
    "build_graphql_endpoint",
    "normalize_shop_domain",
    "format_graphql_errors",
    "HttpxTransport",
    "build_search_query",
    "quote_value",
]
