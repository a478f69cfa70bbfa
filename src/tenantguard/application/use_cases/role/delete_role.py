"""Delete role use case."""

from uuid import UUID

from tenantguard.application.ports import AuditLog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.application.use_cases.role.role_lookup import load_role
from tenantguard.domain.entities import AuditEntry
from tenantguard.domain.value_objects import (
    AdminPermission,
    AuditAction,
    RequestContext,
    Subject,
)


class DeleteRoleUseCase:
    """Delete a business role. System roles are never deleted."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        access_guard: AccessGuard,
        audit_log: AuditLog,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._guard = access_guard
        self._audit_log = audit_log

    async def execute(self, actor: Subject, context: RequestContext, role_id: UUID) -> None:
        await self._guard.require(actor, AdminPermission.ROLE_MANAGE, context)
        async with self._uow_factory() as uow:
            role = await load_role(uow, actor.business_id, role_id, for_update=True)
            await uow.roles.delete(role.id)

        self._audit_log.record(
            AuditEntry.new(
                actor.business_id,
                actor.user_id,
                AuditAction.ROLE_DELETE,
                details={"role_id": str(role.id), "role": role.name},
            )
        )
