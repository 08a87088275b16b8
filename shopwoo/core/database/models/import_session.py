"""
Import session model for SQLAlchemy

One run of importing one resource type from one store. This row is the
unit of idempotency for start requests and what progress polling reads.
"""

from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, JSON, Index

from .base import BaseModel, ShopMixin
from .enums import ImportStatus


class ImportSession(BaseModel, ShopMixin):
    """Persisted state of one import run"""

    __tablename__ = "import_sessions"

    resource_type = Column(String(20), nullable=False)
    status = Column(
        String(20), nullable=False, default=ImportStatus.INITIALIZING.value, index=True
    )

    items_total = Column(Integer, nullable=False, default=0)
    items_total_is_estimate = Column(Boolean, nullable=False, default=False)
    items_processed = Column(Integer, nullable=False, default=0)
    items_succeeded = Column(Integer, nullable=False, default=0)
    items_failed = Column(Integer, nullable=False, default=0)
    items_skipped = Column(Integer, nullable=False, default=0)
    batches_completed = Column(Integer, nullable=False, default=0)
    has_next_page = Column(Boolean, nullable=False, default=True)

    options = Column(JSON, nullable=False, default=dict)
    message = Column(Text, nullable=True)

    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_import_sessions_slot", "shop_id", "resource_type", "status"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in ImportStatus.terminal()

    @property
    def is_active(self) -> bool:
        return self.status in ImportStatus.active()

    def __repr__(self) -> str:
        return (
            f"<ImportSession(id={self.id}, shop_id={self.shop_id}, "
            f"resource_type={self.resource_type}, status={self.status})>"
        )
