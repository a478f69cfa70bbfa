"""List roles use case."""

from tenantguard.application.ports import UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.entities import Role
from tenantguard.domain.value_objects import AdminPermission, RequestContext, Subject


class ListRolesUseCase:
    """List business roles plus shared system roles."""

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory, access_guard: AccessGuard) -> None:
        self._uow_factory = unit_of_work_factory
        self._guard = access_guard

    async def execute(self, actor: Subject, context: RequestContext) -> list[Role]:
        await self._guard.require(actor, AdminPermission.ROLE_READ, context)
        async with self._uow_factory() as uow:
            roles = await uow.roles.list_for_business(actor.business_id)
        return sorted(roles, key=lambda r: (not r.is_system_role, r.name))
