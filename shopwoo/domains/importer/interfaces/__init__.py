"""
Import engine interfaces
"""

from .entity_upserter import IEntityUpserter

__all__ = ["IEntityUpserter"]
