"""
Persisted tunables with a three-level fallback

Every lookup goes: stored setting -> per-resource constant -> global constant,
then is capped at the source API page ceiling.
"""

from typing import Any, Optional

from shopwoo.core.config.settings import settings
from shopwoo.core.logging import get_logger
from shopwoo.repository.AppSettingRepository import AppSettingRepository
from shopwoo.shared.constants.importer import (
    BATCH_SIZE_DEFAULTS,
    COUNT_BATCH_SIZE_DEFAULTS,
    MAX_COUNT_ITEMS,
    MAX_IMPORT_ITEMS,
    SETTING_BATCH_SIZE_PREFIX,
    SETTING_COUNT_BATCH_SIZE_PREFIX,
    SETTING_STUCK_THRESHOLD,
)

logger = get_logger(__name__)


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


class SettingsService:
    """Read path for operator-tunable settings stored in `app_settings`"""

    def __init__(self, repository: Optional[AppSettingRepository] = None):
        self.repository = repository or AppSettingRepository()

    async def get_setting(self, key: str, default: Any = None) -> Any:
        """Stored value for `key`, or `default` when unset"""
        row = await self.repository.get(key)
        if row is None or row.value is None:
            return default
        return row.value

    async def set_setting(self, key: str, value: Any) -> None:
        await self.repository.set(key, value)

    async def _resolve_size(
        self, key: str, per_resource: Optional[int], fallback: int
    ) -> int:
        raw = await self.get_setting(key)
        stored = _positive_int(raw)
        if stored is None and raw is not None:
            logger.warning("Ignoring invalid batch size setting", key=key, value=raw)
        size = stored or per_resource or fallback
        return min(size, settings.shopify.SHOPIFY_MAX_PAGE_SIZE)

    async def get_batch_size(self, resource_type: str) -> int:
        """Page size for the import path"""
        return await self._resolve_size(
            f"{SETTING_BATCH_SIZE_PREFIX}{resource_type}",
            BATCH_SIZE_DEFAULTS.get(resource_type),
            MAX_IMPORT_ITEMS,
        )

    async def get_count_batch_size(self, resource_type: str) -> int:
        """Page size for counting"""
        return await self._resolve_size(
            f"{SETTING_COUNT_BATCH_SIZE_PREFIX}{resource_type}",
            COUNT_BATCH_SIZE_DEFAULTS.get(resource_type),
            MAX_COUNT_ITEMS,
        )

    async def get_stuck_threshold_seconds(self) -> int:
        stored = _positive_int(await self.get_setting(SETTING_STUCK_THRESHOLD))
        return stored or settings.imports.STUCK_SESSION_THRESHOLD_SECONDS
