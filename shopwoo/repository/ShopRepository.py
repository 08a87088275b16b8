from typing import Optional
from sqlalchemy import select
from shopwoo.core.database.models import Shop
from shopwoo.core.database.session import get_session_context


class ShopRepository:
    def __init__(self, session_factory=None):
        """
        Initializes the repository with a session factory.
        Repository handles its own session management.
        """
        self.session_factory = session_factory or get_session_context

    async def get_by_id(self, shop_id: str) -> Optional[Shop]:
        """Fetch a shop by primary key regardless of its active flag."""
        async with self.session_factory() as session:
            result = await session.execute(select(Shop).where(Shop.id == shop_id))
            return result.scalar_one_or_none()

    async def get_active_by_id(self, shop_id: str) -> Optional[Shop]:
        """
        Fetches a single active shop by its primary key (ID).

        Args:
            shop_id: The string ID of the shop to retrieve.

        Returns:
            A 'Shop' instance if found and active, otherwise None.
        """
        async with self.session_factory() as session:
            statement = select(Shop).where(
                (Shop.id == shop_id) & (Shop.is_active == True)
            )
            result = await session.execute(statement)
            return result.scalar_one_or_none()

    async def get_active_by_domain(self, shop_domain: str) -> Optional[Shop]:
        """Fetch an active shop by its myshopify domain."""
        async with self.session_factory() as session:
            statement = select(Shop).where(
                (Shop.shop_domain == shop_domain) & (Shop.is_active == True)
            )
            result = await session.execute(statement)
            return result.scalar_one_or_none()

    async def create(
        self,
        shop_domain: str,
        access_token: str,
        store_name: Optional[str] = None,
        api_version: Optional[str] = None,
        is_active: bool = True,
    ) -> Shop:
        """Register a source store."""
        async with self.session_factory() as session:
            shop = Shop(
                shop_domain=shop_domain,
                access_token=access_token,
                store_name=store_name,
                api_version=api_version,
                is_active=is_active,
            )
            session.add(shop)
            await session.commit()
            return shop
