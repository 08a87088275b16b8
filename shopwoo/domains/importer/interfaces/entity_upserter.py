"""
Entity upsert collaborator interface

The concrete implementation maps a normalized Shopify record onto a
WooCommerce entity and writes it. It lives outside this service and is
loaded from the ENTITY_UPSERTER setting.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Set

from ..models.outcome import UpsertResult


class IEntityUpserter(ABC):
    """Insert-or-update keyed by the Shopify global id"""

    @abstractmethod
    async def upsert(
        self, resource_type: str, record: Dict[str, Any], options: Dict[str, Any]
    ) -> UpsertResult:
        """
        Write one record to the target store.

        Args:
            resource_type: products, customers or orders
            record: normalized Shopify record
            options: the session's filter/options payload

        Returns:
            UpsertResult with outcome imported, updated, skipped or failed
        """
        pass

    @abstractmethod
    async def find_existing(
        self, resource_type: str, external_ids: Iterable[str]
    ) -> Set[str]:
        """Subset of `external_ids` already present in the target store"""
        pass
