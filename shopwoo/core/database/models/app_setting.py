"""
Persisted key-value settings

Operator tunables (batch sizes, stuck threshold) and the per-resource
pagination cursors live here.
"""

from sqlalchemy import Column, String, JSON

from .base import Base, TimestampMixin


class AppSetting(Base, TimestampMixin):
    """One setting row keyed by name"""

    __tablename__ = "app_settings"

    key = Column(String(191), primary_key=True)
    value = Column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<AppSetting(key={self.key})>"
