"""Create role use case."""

from uuid import uuid4

from tenantguard.application.ports import AuditLog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.entities import AuditEntry, Role
from tenantguard.domain.exceptions import ConstraintViolation, ValidationError
from tenantguard.domain.value_objects import (
    AdminPermission,
    AuditAction,
    RequestContext,
    Subject,
)

MAX_ROLE_NAME = 50


class CreateRoleUseCase:
    """Create a role owned by the actor's business."""

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
        name: str,
        description: str = "",
    ) -> Role:
        await self._guard.require(actor, AdminPermission.ROLE_MANAGE, context)
        name = (name or "").strip()
        if not name or len(name) > MAX_ROLE_NAME:
            raise ValidationError(f"Role name must be 1..{MAX_ROLE_NAME} characters")

        async with self._uow_factory() as uow:
            if await uow.roles.get_by_name(actor.business_id, name):
                raise ConstraintViolation(f"Role '{name}' already exists")
            role = Role(
                id=uuid4(),
                business_id=actor.business_id,
                name=name,
                description=description or "",
            )
            await uow.roles.create(role)

        self._audit_log.record(
            AuditEntry.new(
                actor.business_id,
                actor.user_id,
                AuditAction.ROLE_CREATE,
                details={"role_id": str(role.id), "role": role.name},
            )
        )
        return role
