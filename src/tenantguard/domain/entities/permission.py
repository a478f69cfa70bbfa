"""Permission catalog entry."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class Permission:
    """Global, immutable permission such as ``customer:create``."""

    id: UUID
    name: str
    category: str
    resource_type: str
    action: str
    description: str | None = None
