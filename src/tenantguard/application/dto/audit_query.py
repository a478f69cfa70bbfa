"""Audit query DTOs and cursor encoding."""

import base64
import binascii
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from tenantguard.domain.entities import AuditEntry
from tenantguard.domain.exceptions import ValidationError

MAX_AUDIT_PAGE = 100


@dataclass
class AuditFilters:
    """Optional filters for audit listing. All set filters must match."""

    actor_user_id: str | None = None
    subject_user_id: str | None = None
    action: str | None = None
    permission_name: str | None = None
    start: datetime | None = None
    end: datetime | None = None

    def matches(self, entry: AuditEntry) -> bool:
        """In-memory equivalent of the SQL filter."""
        if self.actor_user_id and entry.actor_user_id != self.actor_user_id:
            return False
        if self.subject_user_id and entry.subject_user_id != self.subject_user_id:
            return False
        if self.action and entry.action != self.action:
            return False
        if self.permission_name and entry.permission_name != self.permission_name:
            return False
        if self.start and entry.timestamp < self.start:
            return False
        if self.end and entry.timestamp > self.end:
            return False
        return True


@dataclass
class AuditPage:
    """One page of audit entries, newest first."""

    items: list[AuditEntry]
    next_cursor: str | None


def encode_cursor(entry: AuditEntry) -> str:
    """Keyset cursor pointing after ``entry`` in (timestamp desc, id desc) order."""
    raw = f"{entry.timestamp.isoformat()}|{entry.id}"
    return base64.urlsafe_b64encode(raw.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    """Inverse of encode_cursor. Raises ValidationError for malformed cursors."""
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        ts, entry_id = raw.split("|", 1)
        return datetime.fromisoformat(ts), UUID(entry_id)
    except (ValueError, binascii.Error, UnicodeDecodeError) as e:
        raise ValidationError("Invalid cursor") from e
