"""Role repository port."""

from typing import Protocol
from uuid import UUID

from tenantguard.domain.entities import Role


class RoleRepository(Protocol):
    """Port for role, role grant and user role persistence."""

    async def get_by_id(self, role_id: UUID) -> Role | None: ...

    async def get_by_name(self, business_id: UUID, name: str) -> Role | None: ...

    async def list_for_business(self, business_id: UUID) -> list[Role]: ...

    async def list_for_user(self, user_id: str, business_id: UUID) -> list[Role]: ...

    async def get_permission_ids(self, role_id: UUID) -> set[UUID]: ...

    async def grant(self, role_id: UUID, permission_id: UUID) -> bool: ...

    async def revoke(self, role_id: UUID, permission_id: UUID) -> bool: ...

    async def replace_permissions(self, role_id: UUID, permission_ids: set[UUID]) -> None: ...

    async def create(self, role: Role) -> Role: ...

    async def delete(self, role_id: UUID) -> None: ...

    async def assign_user(self, user_id: str, business_id: UUID, role_id: UUID) -> None: ...
