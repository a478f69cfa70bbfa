"""Audit actions and recorded outcomes."""

from enum import StrEnum


class AuditAction(StrEnum):
    """Kinds of audited events."""

    AUTHORIZE = "authorize"
    AUTHORIZE_ERROR = "authorize.error"
    AUTHORIZE_TENANT_MISMATCH = "authorize.tenant_mismatch"
    ROLE_CREATE = "role.create"
    ROLE_DELETE = "role.delete"
    ROLE_PERMISSION_GRANT = "role.permission.grant"
    ROLE_PERMISSION_REVOKE = "role.permission.revoke"
    ROLE_PERMISSION_REPLACE = "role.permission.replace"
    USER_ROLE_ASSIGN = "user.role.assign"
    USER_OVERRIDE_SET = "user_override.set"
    USER_OVERRIDE_REVOKE = "user_override.revoke"
    BUSINESS_RULE_CREATE = "business_rule.create"
    BUSINESS_RULE_DELETE = "business_rule.delete"


class AuditDecision(StrEnum):
    """Outcome stored on authorization audit entries."""

    ALLOW = "allow"
    DENY = "deny"
    ERROR = "error"
