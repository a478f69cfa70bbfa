"""Audit repository port."""

from typing import Protocol
from uuid import UUID

from tenantguard.application.dto.audit_query import AuditFilters
from tenantguard.domain.entities import AuditEntry


class AuditRepository(Protocol):
    """Port for append-only audit persistence."""

    async def append(self, entry: AuditEntry) -> None: ...

    async def list(
        self,
        business_id: UUID,
        filters: AuditFilters,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[AuditEntry], str | None]: ...
