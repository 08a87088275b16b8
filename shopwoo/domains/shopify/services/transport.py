"""
httpx-backed HTTP transport for the Shopify Admin API
"""

from typing import Dict, Optional

import httpx

from shopwoo.core.config.settings import settings
from shopwoo.core.exceptions import ShopifyTransportError
from shopwoo.core.logging import get_logger
from ..interfaces.api_client import IHttpTransport, TransportResponse

logger = get_logger(__name__)


class HttpxTransport(IHttpTransport):
    """Sends requests through a shared httpx.AsyncClient"""

    def __init__(
        self,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        timeout = timeout or settings.shopify.SHOPIFY_TIMEOUT_SECONDS
        self.timeout = httpx.Timeout(timeout, connect=min(10.0, timeout))
        self.http_client: Optional[httpx.AsyncClient] = client
        self._owns_client = client is None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def connect(self):
        """Initialize HTTP client"""
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": "ShopWoo-Importer/1.0"},
            )

    async def close(self):
        """Close HTTP client"""
        if self.http_client is not None and self._owns_client:
            await self.http_client.aclose()
            self.http_client = None

    async def send(
        self,
        url: str,
        method: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> TransportResponse:
        await self.connect()

        try:
            response = await self.http_client.request(
                method, url, headers=headers, content=body
            )
        except httpx.TimeoutException as e:
            logger.error("Shopify request timed out", url=url, error=str(e))
            raise ShopifyTransportError(
                f"Request to Shopify timed out: {e}", url=url, cause=e
            )
        except httpx.HTTPError as e:
            logger.error(
                "Shopify request failed",
                url=url,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise ShopifyTransportError(
                f"Could not reach Shopify: {e}", url=url, cause=e
            )

        return TransportResponse(status=response.status_code, body=response.text)
