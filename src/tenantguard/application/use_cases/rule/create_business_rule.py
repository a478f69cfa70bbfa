"""Create business rule use case."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from tenantguard.application.ports import AuditLog, PermissionCatalog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.application.use_cases.role.role_lookup import load_role
from tenantguard.domain.entities import AuditEntry, BusinessRule
from tenantguard.domain.exceptions import UnknownPermission, ValidationError
from tenantguard.domain.value_objects import (
    AdminPermission,
    AuditAction,
    RequestContext,
    RuleEffect,
    Subject,
    SubjectRef,
    SubjectType,
    condition_type_of,
    parse_condition,
)


class CreateBusinessRuleUseCase:
    """Attach a conditional allow/deny rule to a role or a user."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        catalog: PermissionCatalog,
        access_guard: AccessGuard,
        audit_log: AuditLog,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._catalog = catalog
        self._guard = access_guard
        self._audit_log = audit_log

    async def execute(
        self,
        actor: Subject,
        context: RequestContext,
        *,
        subject_type: str,
        subject_id: str,
        condition_type: str,
        condition: dict[str, Any] | None,
        effect: str,
        permission_name: str | None = None,
        description: str | None = None,
    ) -> BusinessRule:
        """Validate and store the rule. ``permission_name`` None applies it to all permissions."""
        await self._guard.require(actor, AdminPermission.RULE_MANAGE, context)

        try:
            kind = SubjectType(subject_type)
        except ValueError as e:
            raise ValidationError(f"subject_type must be 'user' or 'role' (got {subject_type!r})") from e
        try:
            rule_effect = RuleEffect(effect)
        except ValueError as e:
            raise ValidationError(f"effect must be 'allow' or 'deny' (got {effect!r})") from e
        if not subject_id:
            raise ValidationError("subject_id is required")
        parsed = parse_condition(condition_type, condition)

        permission_id = None
        if permission_name:
            permission = self._catalog.lookup(permission_name)
            if permission is None:
                raise UnknownPermission(permission_name)
            permission_id = permission.id

        async with self._uow_factory() as uow:
            if kind is SubjectType.ROLE:
                try:
                    role_id = UUID(subject_id)
                except ValueError as e:
                    raise ValidationError("subject_id must be a role id") from e
                await load_role(uow, actor.business_id, role_id)
                # Stored in canonical form; resolution matches on str(role.id).
                subject = SubjectRef.role(role_id)
            else:
                subject = SubjectRef.user(subject_id)
            rule = BusinessRule(
                id=uuid4(),
                business_id=actor.business_id,
                subject=subject,
                condition=parsed,
                effect=rule_effect,
                created_at=datetime.now(UTC),
                permission_id=permission_id,
                created_by=actor.user_id,
                description=description,
            )
            await uow.rules.create(rule)

        self._audit_log.record(
            AuditEntry.new(
                actor.business_id,
                actor.user_id,
                AuditAction.BUSINESS_RULE_CREATE,
                permission_name=permission_name,
                subject_user_id=subject_id if kind is SubjectType.USER else None,
                details={
                    "rule_id": str(rule.id),
                    "subject": str(rule.subject),
                    "effect": rule_effect.value,
                    "condition_type": condition_type_of(parsed).value,
                    "condition": parsed.to_payload(),
                },
            )
        )
        return rule
