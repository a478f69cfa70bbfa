"""Audit log entry."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from tenantguard.domain.value_objects import AuditAction, AuditDecision


@dataclass(frozen=True)
class AuditEntry:
    """Append-only record of an authorization decision or administrative change.

    The id is fixed when the entry is created so a retried write of the same
    entry is recognised as a duplicate.
    """

    id: UUID
    business_id: UUID
    actor_user_id: str
    action: AuditAction
    timestamp: datetime
    permission_name: str | None = None
    subject_user_id: str | None = None
    decision: AuditDecision | None = None
    reason: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        business_id: UUID,
        actor_user_id: str,
        action: AuditAction,
        **fields: Any,
    ) -> "AuditEntry":
        timestamp = fields.pop("timestamp", None) or datetime.now(UTC)
        return cls(
            id=uuid4(),
            business_id=business_id,
            actor_user_id=actor_user_id,
            action=action,
            timestamp=timestamp,
            **fields,
        )
