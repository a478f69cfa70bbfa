"""Revoke permission from role use case."""

from uuid import UUID

from tenantguard.application.ports import AuditLog, PermissionCatalog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.application.use_cases.role.role_lookup import load_role
from tenantguard.domain.entities import AuditEntry
from tenantguard.domain.exceptions import UnknownPermission
from tenantguard.domain.value_objects import (
    AdminPermission,
    AuditAction,
    RequestContext,
    Subject,
)


class RevokePermissionUseCase:
    """Remove a permission from a business role. Revoking a missing grant is a no-op."""

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
        role_id: UUID,
        permission_name: str,
    ) -> bool:
        """Revoke permission. Returns True when a grant was removed."""
        await self._guard.require(actor, AdminPermission.ROLE_MANAGE, context)
        permission = self._catalog.lookup(permission_name)
        if permission is None:
            raise UnknownPermission(permission_name)

        async with self._uow_factory() as uow:
            role = await load_role(uow, actor.business_id, role_id, for_update=True)
            changed = await uow.roles.revoke(role.id, permission.id)

        self._audit_log.record(
            AuditEntry.new(
                actor.business_id,
                actor.user_id,
                AuditAction.ROLE_PERMISSION_REVOKE,
                permission_name=permission.name,
                details={"role_id": str(role.id), "role": role.name, "changed": changed},
            )
        )
        return changed
