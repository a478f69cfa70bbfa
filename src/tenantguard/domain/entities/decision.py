"""Authorization decision."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from tenantguard.domain.value_objects import DecisionSource


@dataclass(frozen=True)
class Decision:
    """Outcome of one authorization. Transient; only logged."""

    allowed: bool
    source: DecisionSource
    reason: str
    evaluated_at: datetime
    matched_rule_id: UUID | None = None
    override_id: UUID | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "allowed": self.allowed,
            "source": self.source.value,
            "reason": self.reason,
            "matched_rule_id": str(self.matched_rule_id) if self.matched_rule_id else None,
            "override_id": str(self.override_id) if self.override_id else None,
            "evaluated_at": self.evaluated_at.isoformat(),
        }
