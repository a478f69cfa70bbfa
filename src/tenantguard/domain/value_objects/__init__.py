"""Domain value objects."""

from tenantguard.domain.value_objects.admin_permission import AdminPermission
from tenantguard.domain.value_objects.audit_action import AuditAction, AuditDecision
from tenantguard.domain.value_objects.condition import (
    Condition,
    ConditionType,
    DayOfWeekCondition,
    LocationCondition,
    TimeWindowCondition,
    condition_matches,
    condition_type_of,
    parse_condition,
)
from tenantguard.domain.value_objects.decision_source import DecisionSource
from tenantguard.domain.value_objects.request_context import RequestContext
from tenantguard.domain.value_objects.rule_effect import RuleEffect
from tenantguard.domain.value_objects.subject import Subject, SubjectRef, SubjectType

__all__ = [
    "AdminPermission",
    "AuditAction",
    "AuditDecision",
    "Condition",
    "ConditionType",
    "DayOfWeekCondition",
    "DecisionSource",
    "LocationCondition",
    "RequestContext",
    "RuleEffect",
    "Subject",
    "SubjectRef",
    "SubjectType",
    "TimeWindowCondition",
    "condition_matches",
    "condition_type_of",
    "parse_condition",
]
