"""Repository ports."""

from tenantguard.application.ports.repositories.audit_repository import AuditRepository
from tenantguard.application.ports.repositories.override_repository import (
    OverrideRepository,
)
from tenantguard.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from tenantguard.application.ports.repositories.role_repository import RoleRepository
from tenantguard.application.ports.repositories.rule_repository import RuleRepository

__all__ = [
    "AuditRepository",
    "OverrideRepository",
    "PermissionRepository",
    "RoleRepository",
    "RuleRepository",
]
