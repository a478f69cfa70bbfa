"""List user overrides use case."""

from tenantguard.application.ports import UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.entities import UserOverride
from tenantguard.domain.value_objects import AdminPermission, RequestContext, Subject


class ListUserOverridesUseCase:
    """Overrides of one user in the actor's business, newest first."""

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory, access_guard: AccessGuard) -> None:
        self._uow_factory = unit_of_work_factory
        self._guard = access_guard

    async def execute(
        self,
        actor: Subject,
        context: RequestContext,
        user_id: str,
        include_inactive: bool = False,
    ) -> list[UserOverride]:
        await self._guard.require(actor, AdminPermission.OVERRIDE_MANAGE, context)
        async with self._uow_factory() as uow:
            items = await uow.overrides.list_for_user(
                actor.business_id, user_id, include_inactive=include_inactive
            )
        if not include_inactive:
            items = [o for o in items if o.is_effective(context.at)]
        return sorted(items, key=lambda o: o.granted_at, reverse=True)
