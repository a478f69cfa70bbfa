"""Application ports - interfaces for external adapters."""

from tenantguard.application.ports.audit_log import AuditLog
from tenantguard.application.ports.authorizer import Authorizer
from tenantguard.application.ports.permission_catalog import PermissionCatalog
from tenantguard.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "AuditLog",
    "Authorizer",
    "PermissionCatalog",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
