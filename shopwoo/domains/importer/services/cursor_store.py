"""
Pagination cursor per (store, resource type) slot

A slot matches the one-active-session rule, so sessions for different stores
never share a position. A fresh import clears its own slot before its first
batch so it never resumes from an earlier run's position.
"""

from typing import Optional

from shopwoo.repository.AppSettingRepository import AppSettingRepository
from shopwoo.shared.constants.importer import CURSOR_KEY_PREFIX


class CursorStore:
    def __init__(self, repository: Optional[AppSettingRepository] = None):
        self.repository = repository or AppSettingRepository()

    @staticmethod
    def _key(store_id: str, resource_type: str) -> str:
        return f"{CURSOR_KEY_PREFIX}{store_id}_{resource_type}"

    async def get(self, store_id: str, resource_type: str) -> Optional[str]:
        row = await self.repository.get(self._key(store_id, resource_type))
        if row is None or not row.value:
            return None
        return str(row.value)

    async def set(self, store_id: str, resource_type: str, cursor: str) -> None:
        await self.repository.set(self._key(store_id, resource_type), cursor)

    async def clear(self, store_id: str, resource_type: str) -> None:
        await self.repository.delete(self._key(store_id, resource_type))
