"""
Shopify domain interfaces
"""

from .api_client import IHttpTransport, IShopifyGraphQLClient, TransportResponse

__all__ = ["IHttpTransport", "IShopifyGraphQLClient", "TransportResponse"]
