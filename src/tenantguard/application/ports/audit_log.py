"""Audit log port."""

from typing import Protocol

from tenantguard.domain.entities import AuditEntry


class AuditLog(Protocol):
    """Fire-and-forget audit submission. Must never block the caller."""

    def record(self, entry: AuditEntry) -> None: ...
