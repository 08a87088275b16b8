"""
Tests for filter validation, search query compilation and post filters
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from shopwoo.domains.importer.services.post_filters import (
    apply_post_filters,
    lowest_variant_price,
    total_inventory,
)
from shopwoo.domains.shopify.models import ImportFilters, InventoryStatus
from shopwoo.domains.shopify.services import build_search_query, quote_value
from .conftest import FakeUpserter


def product(pid, prices=(), quantities=(), tags=()):
    return {
        "id": pid,
        "tags": list(tags),
        "variants": [
            {"price": price, "inventoryQuantity": qty}
            for price, qty in zip(prices, quantities or [0] * len(prices))
        ],
    }


class TestImportFilters:
    def test_defaults(self):
        filters = ImportFilters()
        assert filters.tags == []
        assert filters.inventory_status == InventoryStatus.ALL
        assert filters.needs_post_filter is False

    def test_tags_accept_comma_string(self):
        assert ImportFilters(tags="sale, summer ,,").tags == ["sale", "summer"]

    def test_blank_strings_become_none(self):
        assert ImportFilters(vendor="   ").vendor is None

    def test_unknown_keys_rejected(self):
        with pytest.raises(PydanticValidationError):
            ImportFilters(colour="red")

    def test_invalid_enum_rejected(self):
        with pytest.raises(PydanticValidationError):
            ImportFilters(status="deleted")

    def test_inverted_price_range_rejected(self):
        with pytest.raises(PydanticValidationError):
            ImportFilters(min_price=20, max_price=10)

    def test_inverted_date_range_rejected(self):
        with pytest.raises(PydanticValidationError):
            ImportFilters(
                created_at_min=datetime(2024, 2, 1), created_at_max=datetime(2024, 1, 1)
            )

    def test_naive_bounds_read_as_utc(self):
        filters = ImportFilters(
            created_at_min="2024-01-01T00:00:00Z", created_at_max="2024-02-01T00:00:00"
        )
        assert filters.created_at_min == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert filters.created_at_max == datetime(2024, 2, 1, tzinfo=timezone.utc)

    def test_mixed_bounds_compared_after_normalising(self):
        filters = ImportFilters(
            updated_at_min="2024-01-01T12:00:00",
            updated_at_max="2024-01-01T15:00:00+02:00",
        )
        assert filters.updated_at_max.tzinfo is not None

        with pytest.raises(PydanticValidationError) as exc_info:
            ImportFilters(
                created_at_min="2024-03-01T00:00:00",
                created_at_max="2024-02-01T00:00:00Z",
            )
        assert "created_at range is inverted" in str(exc_info.value)

    def test_json_round_trip_through_session_options(self):
        filters = ImportFilters(
            status="draft", tags=["a"], created_at_min="2024-01-01T00:00:00Z", min_price=5
        )
        assert ImportFilters.model_validate(filters.model_dump(mode="json")) == filters


class TestBuildSearchQuery:
    def test_products_default_to_active(self):
        assert build_search_query("products", None) == "status:active"

    def test_products_any_status_has_no_clause(self):
        assert build_search_query("products", ImportFilters(status="any")) is None

    def test_customers_without_filters(self):
        assert build_search_query("customers", ImportFilters()) is None

    def test_full_product_query(self):
        filters = ImportFilters(
            status="archived",
            product_type="Shoes",
            vendor="Nike",
            tags=["sale", "summer"],
            created_at_min=datetime(2024, 1, 1, tzinfo=timezone.utc),
            updated_at_max=datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc),
            search="running",
        )
        assert build_search_query("products", filters) == (
            'status:archived AND product_type:"Shoes" AND vendor:"Nike" AND '
            '(tag:"sale" OR tag:"summer") AND '
            "created_at:>='2024-01-01T00:00:00Z' AND "
            "updated_at:<='2024-06-30T12:00:00Z' AND "
            '"running"'
        )

    def test_order_statuses(self):
        filters = ImportFilters(order_status=["open", "cancelled"])
        assert build_search_query("orders", filters) == "(status:open OR status:cancelled)"

    def test_single_order_status_string(self):
        assert build_search_query("orders", ImportFilters(order_status="closed")) == (
            "status:closed"
        )

    def test_customer_state(self):
        filters = ImportFilters(customer_state="enabled", tags=["vip"])
        assert build_search_query("customers", filters) == 'state:enabled AND tag:"vip"'

    def test_product_only_filters_ignored_for_orders(self):
        assert build_search_query("orders", ImportFilters(vendor="Nike")) is None


class TestQueryInjection:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ('say "hi"', '"say \\"hi\\""'),
            ("back\\slash", '"back\\\\slash"'),
            ('x" OR status:draft OR "', '"x\\" OR status:draft OR \\""'),
        ],
    )
    def test_quote_value_escapes(self, raw, expected):
        assert quote_value(raw) == expected

    def test_injected_operator_stays_inside_quotes(self):
        filters = ImportFilters(status="any", search='") OR (vendor:evil')
        query = build_search_query("products", filters)
        assert query == '"\\") OR (vendor:evil"'
        assert query.startswith('"') and query.endswith('"')


class TestPostFilterHelpers:
    def test_lowest_variant_price_ignores_bad_values(self):
        record = {"variants": [{"price": "12.5"}, {"price": None}, {"price": "3"}]}
        assert lowest_variant_price(record) == 3.0

    def test_lowest_variant_price_none_without_variants(self):
        assert lowest_variant_price({"variants": []}) is None

    def test_total_inventory(self):
        record = {"variants": [{"inventoryQuantity": 2}, {"inventoryQuantity": None}, {"inventoryQuantity": 5}]}
        assert total_inventory(record) == 7


class TestApplyPostFilters:
    async def test_no_post_filters_is_passthrough(self):
        records = [product("p1", ["5"])]
        kept, skipped, lines = await apply_post_filters("products", records, ImportFilters())
        assert kept == records
        assert skipped == 0
        assert lines == []

    async def test_price_range_uses_lowest_variant(self):
        records = [
            product("cheap", ["4", "50"]),
            product("mid", ["15", "60"]),
            product("dear", ["80"]),
            product("noprice", []),
        ]
        filters = ImportFilters(min_price=10, max_price=70)

        kept, skipped, lines = await apply_post_filters("products", records, filters)

        assert [r["id"] for r in kept] == ["mid"]
        assert skipped == 3
        assert any("cheap" in line for line in lines)

    async def test_inventory_status(self):
        records = [
            product("stocked", ["1", "1"], [0, 3]),
            product("empty", ["1"], [0]),
        ]
        in_stock, _, _ = await apply_post_filters(
            "products", records, ImportFilters(inventory_status="in_stock")
        )
        out_of_stock, _, _ = await apply_post_filters(
            "products", records, ImportFilters(inventory_status="out_of_stock")
        )
        assert [r["id"] for r in in_stock] == ["stocked"]
        assert [r["id"] for r in out_of_stock] == ["empty"]

    async def test_tags_case_insensitive_any_match(self):
        records = [
            {"id": "c1", "tags": ["VIP", "wholesale"]},
            {"id": "c2", "tags": "retail, newsletter"},
            {"id": "c3", "tags": []},
        ]
        kept, skipped, _ = await apply_post_filters(
            "customers", records, ImportFilters(tags=["vip", "newsletter"])
        )
        assert [r["id"] for r in kept] == ["c1", "c2"]
        assert skipped == 1

    async def test_tags_not_post_filtered_for_orders(self):
        records = [{"id": "o1", "tags": []}]
        kept, skipped, _ = await apply_post_filters(
            "orders", records, ImportFilters(tags=["vip"])
        )
        assert kept == records
        assert skipped == 0

    async def test_import_type_new_and_existing(self):
        records = [{"id": "o1"}, {"id": "o2"}, {"id": "o3"}]
        upserter = FakeUpserter(existing=["o2"])

        new, new_skipped, _ = await apply_post_filters(
            "orders", records, ImportFilters(import_type="new"), upserter
        )
        existing, existing_skipped, _ = await apply_post_filters(
            "orders", records, ImportFilters(import_type="existing"), upserter
        )

        assert [r["id"] for r in new] == ["o1", "o3"]
        assert new_skipped == 1
        assert [r["id"] for r in existing] == ["o2"]
        assert existing_skipped == 2
