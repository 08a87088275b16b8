"""
Shopify Admin API exceptions

Each error carries the FailureKind the import engine uses to decide the
session transition. None of them are retried by the client.
"""

from typing import Any, Dict, List, Optional

from .base import ShopWooException
from .kinds import FailureKind


class ShopifyAPIError(ShopWooException):
    """Base exception for Shopify Admin API failures"""

    kind: FailureKind = FailureKind.TRANSPORT

    def __init__(
        self,
        message: str,
        error_code: str = "SHOPIFY_API_ERROR",
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message=message, error_code=error_code, details=details, cause=cause
        )


class ShopifyTransportError(ShopifyAPIError):
    """Network unreachable, connection reset or timeout"""

    kind = FailureKind.TRANSPORT

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code="SHOPIFY_TRANSPORT_ERROR",
            details={"url": url},
            **kwargs,
        )


class ShopifyHTTPError(ShopifyAPIError):
    """Non-2xx response from the Admin API"""

    kind = FailureKind.HTTP_STATUS

    def __init__(
        self,
        message: str,
        status: int,
        body_excerpt: str = "",
        error_code: str = "SHOPIFY_HTTP_ERROR",
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details={"status": status, "body_excerpt": body_excerpt},
            **kwargs,
        )
        self.status = status
        self.body_excerpt = body_excerpt


class ShopifyAuthenticationError(ShopifyHTTPError):
    """401/403: bad, expired or revoked access token"""

    kind = FailureKind.AUTHENTICATION

    def __init__(self, message: str, status: int, body_excerpt: str = "", **kwargs):
        super().__init__(
            message=message,
            status=status,
            body_excerpt=body_excerpt,
            error_code="SHOPIFY_AUTHENTICATION_ERROR",
            **kwargs,
        )


class ShopifyMalformedResponseError(ShopifyAPIError):
    """Body is not JSON or lacks an expected field"""

    kind = FailureKind.MALFORMED_RESPONSE

    def __init__(self, message: str, body_excerpt: str = "", **kwargs):
        super().__init__(
            message=message,
            error_code="SHOPIFY_MALFORMED_RESPONSE",
            details={"body_excerpt": body_excerpt},
            **kwargs,
        )
        self.body_excerpt = body_excerpt


class ShopifyGraphQLError(ShopifyAPIError):
    """Response carried a GraphQL `errors` array"""

    kind = FailureKind.GRAPHQL

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None, **kwargs):
        super().__init__(
            message=message,
            error_code="SHOPIFY_GRAPHQL_ERROR",
            details={"errors": errors or []},
            **kwargs,
        )
        self.errors = errors or []
