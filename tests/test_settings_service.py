"""
Tests for persisted tunables and the cursor store
"""

import pytest

from shopwoo.core.config.settings import settings


class TestSettingsService:
    async def test_get_setting_default(self, settings_service):
        assert await settings_service.get_setting("missing", "fallback") == "fallback"

    async def test_set_then_get(self, settings_service):
        await settings_service.set_setting("greeting", {"text": "hi"})
        assert await settings_service.get_setting("greeting") == {"text": "hi"}

    async def test_set_overwrites(self, settings_service):
        await settings_service.set_setting("batch_size_orders", 10)
        await settings_service.set_setting("batch_size_orders", 12)
        assert await settings_service.get_setting("batch_size_orders") == 12

    @pytest.mark.parametrize(
        "resource_type,expected", [("products", 50), ("customers", 50), ("orders", 25)]
    )
    async def test_batch_size_per_resource_constant(
        self, settings_service, resource_type, expected
    ):
        assert await settings_service.get_batch_size(resource_type) == expected

    async def test_batch_size_global_fallback(self, settings_service):
        assert await settings_service.get_batch_size("gift_cards") == 250

    async def test_stored_batch_size_wins(self, settings_service):
        await settings_service.set_setting("batch_size_products", "120")
        assert await settings_service.get_batch_size("products") == 120

    async def test_stored_batch_size_capped(self, settings_service):
        await settings_service.set_setting("batch_size_products", 5000)
        assert await settings_service.get_batch_size("products") == 250

    @pytest.mark.parametrize("bad", [0, -5, "lots", True])
    async def test_invalid_stored_value_ignored(self, settings_service, bad):
        await settings_service.set_setting("batch_size_customers", bad)
        assert await settings_service.get_batch_size("customers") == 50

    async def test_count_batch_size_uses_its_own_key(self, settings_service):
        await settings_service.set_setting("batch_size_products", 10)
        assert await settings_service.get_count_batch_size("products") == 250

        await settings_service.set_setting("batch_size_count_products", 100)
        assert await settings_service.get_count_batch_size("products") == 100

    async def test_stuck_threshold(self, settings_service):
        default = settings.imports.STUCK_SESSION_THRESHOLD_SECONDS
        assert await settings_service.get_stuck_threshold_seconds() == default

        await settings_service.set_setting("stuck_session_threshold_seconds", 600)
        assert await settings_service.get_stuck_threshold_seconds() == 600


class TestCursorStore:
    async def test_empty(self, cursor_store):
        assert await cursor_store.get("7", "products") is None

    async def test_set_get_clear(self, cursor_store):
        await cursor_store.set("7", "products", "eyJsYXN0X2lkIjo")
        assert await cursor_store.get("7", "products") == "eyJsYXN0X2lkIjo"

        await cursor_store.clear("7", "products")
        assert await cursor_store.get("7", "products") is None

    async def test_slots_are_per_resource_type(self, cursor_store):
        await cursor_store.set("7", "products", "p-cursor")
        await cursor_store.set("7", "orders", "o-cursor")

        await cursor_store.clear("7", "products")

        assert await cursor_store.get("7", "products") is None
        assert await cursor_store.get("7", "orders") == "o-cursor"

    async def test_slots_are_per_store(self, cursor_store, app_settings_repo):
        await cursor_store.set("7", "products", "seven")
        await cursor_store.set("8", "products", "eight")

        await cursor_store.clear("8", "products")

        assert await cursor_store.get("7", "products") == "seven"
        assert await cursor_store.get("8", "products") is None
        assert (await app_settings_repo.get("cursor_7_products")).value == "seven"

    async def test_clear_missing_is_noop(self, cursor_store):
        await cursor_store.clear("7", "customers")
        assert await cursor_store.get("7", "customers") is None
