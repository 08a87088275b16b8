"""
Ephemeral fetch results produced by the GraphQL client
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PageResult:
    """One page of normalized records"""

    records: List[Dict[str, Any]] = field(default_factory=list)
    has_next_page: bool = False
    end_cursor: Optional[str] = None

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class CountResult:
    """Record count bounded by one count page"""

    count: int
    is_partial: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "is_partial": self.is_partial}
