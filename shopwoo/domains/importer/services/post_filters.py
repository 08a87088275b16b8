"""
Filters Shopify's search syntax cannot express, applied to a fetched page
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from shopwoo.core.logging import get_logger
from shopwoo.domains.shopify.models import ImportFilters, ImportType, InventoryStatus
from shopwoo.shared.constants.importer import RESOURCE_CUSTOMERS, RESOURCE_PRODUCTS
from ..interfaces.entity_upserter import IEntityUpserter

logger = get_logger(__name__)

TAGGED_RESOURCES = (RESOURCE_PRODUCTS, RESOURCE_CUSTOMERS)


def _record_tags(record: Dict[str, Any]) -> List[str]:
    tags = record.get("tags") or []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [str(tag).strip().lower() for tag in tags if str(tag).strip()]


def lowest_variant_price(record: Dict[str, Any]) -> Optional[float]:
    prices = []
    for variant in record.get("variants") or []:
        try:
            prices.append(float(variant.get("price")))
        except (TypeError, ValueError):
            continue
    return min(prices) if prices else None


def total_inventory(record: Dict[str, Any]) -> int:
    total = 0
    for variant in record.get("variants") or []:
        quantity = variant.get("inventoryQuantity")
        if isinstance(quantity, (int, float)):
            total += int(quantity)
    return total


def matches_price(record: Dict[str, Any], filters: ImportFilters) -> bool:
    if not filters.has_price_filter:
        return True
    price = lowest_variant_price(record)
    if price is None:
        return False
    if filters.min_price is not None and price < filters.min_price:
        return False
    if filters.max_price is not None and price > filters.max_price:
        return False
    return True


def matches_inventory(record: Dict[str, Any], filters: ImportFilters) -> bool:
    if filters.inventory_status == InventoryStatus.IN_STOCK:
        return total_inventory(record) > 0
    if filters.inventory_status == InventoryStatus.OUT_OF_STOCK:
        return total_inventory(record) <= 0
    return True


def matches_tags(record: Dict[str, Any], wanted: Iterable[str]) -> bool:
    wanted = {tag.lower() for tag in wanted}
    if not wanted:
        return True
    return bool(wanted.intersection(_record_tags(record)))


async def apply_post_filters(
    resource_type: str,
    records: List[Dict[str, Any]],
    filters: ImportFilters,
    upserter: Optional[IEntityUpserter] = None,
) -> Tuple[List[Dict[str, Any]], int, List[str]]:
    """
    Drop records that fail the post-fetch filters.

    Returns:
        (kept records, number skipped, log lines describing the skips)
    """
    if not filters.needs_post_filter or not records:
        return list(records), 0, []

    kept: List[Dict[str, Any]] = []
    log_lines: List[str] = []

    for record in records:
        record_id = record.get("id")

        if resource_type == RESOURCE_PRODUCTS:
            if not matches_price(record, filters):
                log_lines.append(f"Skipped {record_id}: outside price range")
                continue
            if not matches_inventory(record, filters):
                log_lines.append(
                    f"Skipped {record_id}: inventory is not "
                    f"{filters.inventory_status.value}"
                )
                continue

        if resource_type in TAGGED_RESOURCES and not matches_tags(record, filters.tags):
            log_lines.append(f"Skipped {record_id}: no matching tag")
            continue

        kept.append(record)

    if filters.import_type != ImportType.ALL and kept:
        if upserter is None:
            raise ValueError("import_type filtering needs an entity upserter")

        ids = [str(r["id"]) for r in kept if r.get("id")]
        existing = await upserter.find_existing(resource_type, ids)
        want_existing = filters.import_type == ImportType.EXISTING

        filtered = []
        for record in kept:
            is_existing = str(record.get("id")) in existing
            if is_existing == want_existing:
                filtered.append(record)
            else:
                state = "already imported" if is_existing else "not yet imported"
                log_lines.append(f"Skipped {record.get('id')}: {state}")
        kept = filtered

    skipped = len(records) - len(kept)
    if skipped:
        logger.debug(
            "Post filters removed records",
            resource_type=resource_type,
            skipped=skipped,
            kept=len(kept),
        )
    return kept, skipped, log_lines
