"""User override repository port."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from tenantguard.domain.entities import UserOverride


class OverrideRepository(Protocol):
    """Port for per-user override persistence."""

    async def get_active(
        self, business_id: UUID, user_id: str, permission_id: UUID, as_of: datetime
    ) -> UserOverride | None: ...

    async def replace_active(self, override: UserOverride) -> UserOverride: ...

    async def deactivate(
        self,
        business_id: UUID,
        user_id: str,
        permission_id: UUID,
        revoked_by: str,
        revoked_at: datetime,
    ) -> UserOverride | None: ...

    async def list_for_user(
        self, business_id: UUID, user_id: str, include_inactive: bool = False
    ) -> list[UserOverride]: ...
