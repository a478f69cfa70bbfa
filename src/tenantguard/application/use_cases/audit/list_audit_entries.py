"""List audit entries use case."""

from tenantguard.application.dto.audit_query import MAX_AUDIT_PAGE, AuditFilters, AuditPage
from tenantguard.application.ports import UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.exceptions import ValidationError
from tenantguard.domain.value_objects import AdminPermission, RequestContext, Subject


class ListAuditEntriesUseCase:
    """Audit entries of the actor's business, newest first, cursor paginated."""

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory, access_guard: AccessGuard) -> None:
        self._uow_factory = unit_of_work_factory
        self._guard = access_guard

    async def execute(
        self,
        actor: Subject,
        context: RequestContext,
        filters: AuditFilters,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> AuditPage:
        await self._guard.require(actor, AdminPermission.AUDIT_READ, context)
        if filters.start and filters.end and filters.end < filters.start:
            raise ValidationError("end must not be before start")
        limit = max(1, min(limit, MAX_AUDIT_PAGE))
        async with self._uow_factory() as uow:
            items, next_cursor = await uow.audit.list(
                actor.business_id, filters, cursor=cursor, limit=limit
            )
        return AuditPage(items=items, next_cursor=next_cursor)
