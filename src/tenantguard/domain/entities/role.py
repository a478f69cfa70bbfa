"""Role entity for RBAC."""

from dataclasses import dataclass
from uuid import UUID


@dataclass
class Role:
    """Role owned by a business. System roles have no business and are read-only."""

    id: UUID
    business_id: UUID | None
    name: str
    description: str = ""
    is_system_role: bool = False

    def visible_to(self, business_id: UUID) -> bool:
        """True when the role may be used inside ``business_id``."""
        return self.business_id is None or self.business_id == business_id
