"""Permissions that gate the administrative API."""

from enum import StrEnum


class AdminPermission(StrEnum):
    """Catalog names checked by administrative use cases."""

    PERMISSION_READ = "permission:read"
    ROLE_READ = "role:read"
    ROLE_MANAGE = "role:manage"
    OVERRIDE_MANAGE = "user_override:manage"
    RULE_READ = "business_rule:read"
    RULE_MANAGE = "business_rule:manage"
    AUDIT_READ = "audit:read"
