"""Assign role to user use case."""

from uuid import UUID

from tenantguard.application.ports import AuditLog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.application.use_cases.role.role_lookup import load_role
from tenantguard.domain.entities import AuditEntry, Role
from tenantguard.domain.exceptions import ValidationError
from tenantguard.domain.value_objects import (
    AdminPermission,
    AuditAction,
    RequestContext,
    Subject,
)


class AssignUserRoleUseCase:
    """Set the primary role of a user within the actor's business."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        access_guard: AccessGuard,
        audit_log: AuditLog,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._guard = access_guard
        self._audit_log = audit_log

    async def execute(
        self,
        actor: Subject,
        context: RequestContext,
        user_id: str,
        role_id: UUID,
    ) -> Role:
        await self._guard.require(actor, AdminPermission.ROLE_MANAGE, context)
        if not user_id:
            raise ValidationError("user_id is required")

        async with self._uow_factory() as uow:
            role = await load_role(uow, actor.business_id, role_id)
            await uow.roles.assign_user(user_id, actor.business_id, role.id)

        self._audit_log.record(
            AuditEntry.new(
                actor.business_id,
                actor.user_id,
                AuditAction.USER_ROLE_ASSIGN,
                subject_user_id=user_id,
                details={"role_id": str(role.id), "role": role.name},
            )
        )
        return role
