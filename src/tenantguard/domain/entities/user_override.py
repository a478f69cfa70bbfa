"""Per-user permission override (ABAC layer)."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class UserOverride:
    """Explicit allow or deny for one user and permission, optionally expiring.

    At most one override per (business, user, permission) is active; setting a
    new one deactivates the previous. Revoked and superseded rows are kept.
    """

    id: UUID
    business_id: UUID
    user_id: str
    permission_id: UUID
    is_allowed: bool
    granted_by: str
    granted_at: datetime
    expires_at: datetime | None = None
    is_active: bool = True
    revoked_at: datetime | None = None
    revoked_by: str | None = None
    reason: str | None = None

    def is_effective(self, as_of: datetime) -> bool:
        """Active and not expired at ``as_of``."""
        if not self.is_active:
            return False
        return self.expires_at is None or self.expires_at > as_of
