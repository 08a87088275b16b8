"""
Shopify API client interfaces for the import engine
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..models import CountResult, ImportFilters, PageResult


@dataclass
class TransportResponse:
    """Raw HTTP response as seen by the GraphQL client"""

    status: int
    body: str


class IHttpTransport(ABC):
    """Minimal HTTP transport the GraphQL client sends through"""

    @abstractmethod
    async def send(
        self,
        url: str,
        method: str,
        headers: Dict[str, str],
        body: Optional[str] = None,
    ) -> TransportResponse:
        """
        Send one HTTP request.

        Raises:
            ShopifyTransportError: the request never produced a response
        """
        pass


class IShopifyGraphQLClient(ABC):
    """Interface for paginated reads against one store"""

    @abstractmethod
    async def fetch_page(
        self,
        resource_type: str,
        filters: Optional[ImportFilters] = None,
        page_size: Optional[int] = None,
        after_cursor: Optional[str] = None,
    ) -> PageResult:
        """Fetch exactly one page of normalized records"""
        pass

    @abstractmethod
    async def fetch_all(
        self,
        resource_type: str,
        filters: Optional[ImportFilters] = None,
        page_size: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Follow pagination to the end. For bounded reads only."""
        pass

    @abstractmethod
    async def count(
        self, resource_type: str, filters: Optional[ImportFilters] = None
    ) -> CountResult:
        """Count records within one count-sized page"""
        pass
