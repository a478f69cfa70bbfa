"""Permission catalog port."""

from typing import Protocol
from uuid import UUID

from tenantguard.domain.entities import Permission


class PermissionCatalog(Protocol):
    """Read-only registry of permissions, safe for concurrent readers."""

    def lookup(self, name: str) -> Permission | None: ...

    def get(self, permission_id: UUID) -> Permission | None: ...

    def all(self) -> list[Permission]: ...
