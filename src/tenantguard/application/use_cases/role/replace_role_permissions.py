"""Replace role permissions use case."""

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


class ReplaceRolePermissionsUseCase:
    """Set the full permission set of a role in one transaction."""

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
        permission_names: list[str],
    ) -> None:
        await self._guard.require(actor, AdminPermission.ROLE_MANAGE, context)
        ids = set()
        for name in permission_names:
            permission = self._catalog.lookup(name)
            if permission is None:
                raise UnknownPermission(name)
            ids.add(permission.id)

        async with self._uow_factory() as uow:
            role = await load_role(uow, actor.business_id, role_id, for_update=True)
            previous = await uow.roles.get_permission_ids(role.id)
            await uow.roles.replace_permissions(role.id, ids)

        self._audit_log.record(
            AuditEntry.new(
                actor.business_id,
                actor.user_id,
                AuditAction.ROLE_PERMISSION_REPLACE,
                details={
                    "role_id": str(role.id),
                    "role": role.name,
                    "added": sorted(self._names(ids - previous)),
                    "removed": sorted(self._names(previous - ids)),
                },
            )
        )

    def _names(self, ids: set[UUID]) -> list[str]:
        return [p.name for p in (self._catalog.get(i) for i in ids) if p is not None]
