"""Get role permissions use case."""

from uuid import UUID

from tenantguard.application.ports import PermissionCatalog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.application.use_cases.role.role_lookup import load_role
from tenantguard.domain.entities import Permission
from tenantguard.domain.value_objects import AdminPermission, RequestContext, Subject


class GetRolePermissionsUseCase:
    """Permissions granted to a role. Empty list for a role without grants."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        catalog: PermissionCatalog,
        access_guard: AccessGuard,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._catalog = catalog
        self._guard = access_guard

    async def execute(
        self, actor: Subject, context: RequestContext, role_id: UUID
    ) -> list[Permission]:
        await self._guard.require(actor, AdminPermission.ROLE_READ, context)
        async with self._uow_factory() as uow:
            await load_role(uow, actor.business_id, role_id)
            ids = await uow.roles.get_permission_ids(role_id)
        perms = [p for p in (self._catalog.get(i) for i in ids) if p is not None]
        return sorted(perms, key=lambda p: (p.category, p.name))
