"""Permission catalog repository port."""

from typing import Protocol

from tenantguard.domain.entities import Permission


class PermissionRepository(Protocol):
    """Port for reading the global permission catalog."""

    async def list_all(self) -> list[Permission]: ...
