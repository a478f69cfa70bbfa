"""Delete business rule use case."""

from uuid import UUID

from tenantguard.application.ports import AuditLog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.entities import AuditEntry
from tenantguard.domain.exceptions import NotFound
from tenantguard.domain.value_objects import (
    AdminPermission,
    AuditAction,
    RequestContext,
    Subject,
)


class DeleteBusinessRuleUseCase:
    """Remove a business rule of the actor's business."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        access_guard: AccessGuard,
        audit_log: AuditLog,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._guard = access_guard
        self._audit_log = audit_log

    async def execute(self, actor: Subject, context: RequestContext, rule_id: UUID) -> None:
        await self._guard.require(actor, AdminPermission.RULE_MANAGE, context)
        async with self._uow_factory() as uow:
            rule = await uow.rules.get_by_id(actor.business_id, rule_id)
            if rule is None:
                raise NotFound("Rule", rule_id)
            await uow.rules.delete(actor.business_id, rule_id)

        self._audit_log.record(
            AuditEntry.new(
                actor.business_id,
                actor.user_id,
                AuditAction.BUSINESS_RULE_DELETE,
                details={"rule_id": str(rule_id), "subject": str(rule.subject)},
            )
        )
