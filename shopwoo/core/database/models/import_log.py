"""
Import log model for SQLAlchemy

Per-session record of what each batch did, read back by the logs endpoint.
"""

from sqlalchemy import Column, String, Integer, Text, JSON, ForeignKey, Index

from .base import BaseModel, ShopMixin


class ImportLog(BaseModel, ShopMixin):
    """One log entry of an import session"""

    __tablename__ = "import_logs"

    session_id = Column(
        String, ForeignKey("import_sessions.id"), nullable=False, index=True
    )
    level = Column(String(10), nullable=False, index=True)
    message = Column(Text, nullable=False)
    record_id = Column(String(255), nullable=True)
    batch_number = Column(Integer, nullable=True)
    # Order within one write; entries of a batch share created_at
    position = Column(Integer, nullable=False, default=0)
    context = Column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_import_logs_session_created", "session_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ImportLog(id={self.id}, session_id={self.session_id}, "
            f"level={self.level})>"
        )
