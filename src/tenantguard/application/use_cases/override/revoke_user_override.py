"""Revoke user override use case."""

from datetime import UTC, datetime

from tenantguard.application.ports import AuditLog, PermissionCatalog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.entities import AuditEntry, UserOverride
from tenantguard.domain.exceptions import NotFound, UnknownPermission
from tenantguard.domain.value_objects import (
    AdminPermission,
    AuditAction,
    RequestContext,
    Subject,
)


class RevokeUserOverrideUseCase:
    """Deactivate the active override of a user. History is kept."""

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
        user_id: str,
        permission_name: str,
    ) -> UserOverride:
        await self._guard.require(actor, AdminPermission.OVERRIDE_MANAGE, context)
        permission = self._catalog.lookup(permission_name)
        if permission is None:
            raise UnknownPermission(permission_name)

        async with self._uow_factory() as uow:
            revoked = await uow.overrides.deactivate(
                actor.business_id,
                user_id,
                permission.id,
                revoked_by=actor.user_id,
                revoked_at=datetime.now(UTC),
            )
        if revoked is None:
            raise NotFound("Override", f"{user_id}/{permission.name}")

        self._audit_log.record(
            AuditEntry.new(
                actor.business_id,
                actor.user_id,
                AuditAction.USER_OVERRIDE_REVOKE,
                permission_name=permission.name,
                subject_user_id=user_id,
                details={"override_id": str(revoked.id)},
            )
        )
        return revoked
