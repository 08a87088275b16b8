"""
Shop model for SQLAlchemy

Represents a connected Shopify source store.
"""

from sqlalchemy import Column, String, Boolean
from .base import BaseModel


class Shop(BaseModel):
    """Shopify store that imports read from"""

    __tablename__ = "shops"

    shop_domain = Column(String(255), nullable=False, unique=True, index=True)
    access_token = Column(String(1000), nullable=False)
    # Falls back to SHOPIFY_API_VERSION when empty
    api_version = Column(String(20), nullable=True)
    store_name = Column(String(255), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Shop(id={self.id}, shop_domain={self.shop_domain})>"
