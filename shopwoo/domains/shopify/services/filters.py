"""
Compile ImportFilters into Shopify's search query syntax

The compiled string is sent as the `$query` GraphQL variable, never spliced
into the query document. Free-text values are still quoted and escaped here
because the search syntax itself has operators (`OR`, `:`, parentheses)
that unescaped input could inject.
"""

from datetime import datetime, timezone
from typing import List, Optional

from shopwoo.shared.constants.importer import (
    RESOURCE_PRODUCTS,
    RESOURCE_CUSTOMERS,
    RESOURCE_ORDERS,
)
from ..models.filters import ImportFilters, ProductStatus


def quote_value(value: str) -> str:
    """Wrap a free-text value in double quotes, escaping backslash and quote"""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return "'" + value.strftime("%Y-%m-%dT%H:%M:%SZ") + "'"


def _date_range(field: str, low: Optional[datetime], high: Optional[datetime]) -> List[str]:
    parts = []
    if low is not None:
        parts.append(f"{field}:>={_format_timestamp(low)}")
    if high is not None:
        parts.append(f"{field}:<={_format_timestamp(high)}")
    return parts


def _any_of(field: str, values: List[str]) -> Optional[str]:
    if not values:
        return None
    if len(values) == 1:
        return f"{field}:{values[0]}"
    return "(" + " OR ".join(f"{field}:{v}" for v in values) + ")"


def build_search_query(resource_type: str, filters: Optional[ImportFilters]) -> Optional[str]:
    """
    Build the `query:` argument for a resource connection.

    Args:
        resource_type: products, customers or orders
        filters: validated filter payload (None means defaults)

    Returns:
        The search string, or None when nothing narrows the result set.
    """
    filters = filters or ImportFilters()
    parts: List[str] = []

    if resource_type == RESOURCE_PRODUCTS:
        status = filters.status or ProductStatus.ACTIVE
        if status != ProductStatus.ANY:
            parts.append(f"status:{status.value}")
        if filters.product_type:
            parts.append(f"product_type:{quote_value(filters.product_type)}")
        if filters.vendor:
            parts.append(f"vendor:{quote_value(filters.vendor)}")

    elif resource_type == RESOURCE_ORDERS:
        clause = _any_of("status", [s.value for s in filters.order_status])
        if clause:
            parts.append(clause)

    elif resource_type == RESOURCE_CUSTOMERS:
        if filters.customer_state:
            parts.append(f"state:{filters.customer_state.value}")

    tag_clause = _any_of("tag", [quote_value(t) for t in filters.tags])
    if tag_clause:
        parts.append(tag_clause)

    parts.extend(_date_range("created_at", filters.created_at_min, filters.created_at_max))
    parts.extend(_date_range("updated_at", filters.updated_at_min, filters.updated_at_max))

    if filters.search:
        parts.append(quote_value(filters.search))

    if not parts:
        return None
    return " AND ".join(parts)
