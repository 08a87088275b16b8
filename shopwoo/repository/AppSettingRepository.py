from typing import Any, Optional
from sqlalchemy import select, delete
from shopwoo.core.database.models import AppSetting
from shopwoo.core.database.session import get_session_context


class AppSettingRepository:
    def __init__(self, session_factory=None):
        """
        Initializes the repository with a session factory.
        Repository handles its own session management.
        """
        self.session_factory = session_factory or get_session_context

    async def get(self, key: str) -> Optional[AppSetting]:
        """Fetch a setting row by key."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(AppSetting).where(AppSetting.key == key)
            )
            return result.scalar_one_or_none()

    async def set(self, key: str, value: Any) -> AppSetting:
        """Insert or overwrite a setting value."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(AppSetting).where(AppSetting.key == key)
            )
            existing = result.scalar_one_or_none()

            if existing:
                existing.value = value
                row = existing
            else:
                row = AppSetting(key=key, value=value)
                session.add(row)

            await session.commit()
            return row

    async def delete(self, key: str) -> bool:
        """Remove a setting. Returns True when a row was deleted."""
        async with self.session_factory() as session:
            result = await session.execute(
                delete(AppSetting).where(AppSetting.key == key)
            )
            await session.commit()
            return result.rowcount > 0
