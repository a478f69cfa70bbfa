"""Conditional business rule attached to a role or a user."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from tenantguard.domain.value_objects import (
    Condition,
    RequestContext,
    RuleEffect,
    SubjectRef,
    condition_matches,
)


@dataclass
class BusinessRule:
    """Allow or deny a permission (or all, when ``permission_id`` is None)
    for a subject while the condition holds."""

    id: UUID
    business_id: UUID
    subject: SubjectRef
    condition: Condition
    effect: RuleEffect
    created_at: datetime
    permission_id: UUID | None = None
    created_by: str | None = None
    description: str | None = None

    def covers(self, permission_id: UUID) -> bool:
        return self.permission_id is None or self.permission_id == permission_id

    def matches(self, context: RequestContext) -> bool:
        return condition_matches(self.condition, context)
