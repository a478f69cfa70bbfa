"""Domain entities."""

from tenantguard.domain.entities.audit_entry import AuditEntry
from tenantguard.domain.entities.business_rule import BusinessRule
from tenantguard.domain.entities.decision import Decision
from tenantguard.domain.entities.permission import Permission
from tenantguard.domain.entities.role import Role
from tenantguard.domain.entities.user_override import UserOverride

__all__ = [
    "AuditEntry",
    "BusinessRule",
    "Decision",
    "Permission",
    "Role",
    "UserOverride",
]
