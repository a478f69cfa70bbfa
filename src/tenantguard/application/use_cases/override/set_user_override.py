"""Set user override use case."""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from tenantguard.application.ports import AuditLog, PermissionCatalog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.entities import AuditEntry, UserOverride
from tenantguard.domain.exceptions import (
    ConstraintViolation,
    UnknownPermission,
    ValidationError,
)
from tenantguard.domain.value_objects import (
    AdminPermission,
    AuditAction,
    RequestContext,
    Subject,
)

logger = logging.getLogger(__name__)

# Concurrent setters for the same pair may collide on the active-override index.
MAX_ATTEMPTS = 3


class SetUserOverrideUseCase:
    """Explicitly allow or deny a permission for one user, replacing any active override."""

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
        is_allowed: bool,
        expires_at: datetime | None = None,
        reason: str | None = None,
    ) -> UserOverride:
        await self._guard.require(actor, AdminPermission.OVERRIDE_MANAGE, context)
        if not user_id:
            raise ValidationError("user_id is required")
        permission = self._catalog.lookup(permission_name)
        if permission is None:
            raise UnknownPermission(permission_name)

        now = datetime.now(UTC)
        if expires_at is not None:
            if expires_at.tzinfo is None:
                raise ValidationError("expires_at must include a timezone")
            if expires_at <= now:
                raise ValidationError("expires_at must be in the future")

        for attempt in range(1, MAX_ATTEMPTS + 1):
            override = UserOverride(
                id=uuid4(),
                business_id=actor.business_id,
                user_id=user_id,
                permission_id=permission.id,
                is_allowed=is_allowed,
                granted_by=actor.user_id,
                granted_at=now,
                expires_at=expires_at,
                reason=reason,
            )
            try:
                async with self._uow_factory() as uow:
                    await uow.overrides.replace_active(override)
                break
            except ConstraintViolation:
                if attempt == MAX_ATTEMPTS:
                    raise
                logger.info(
                    "Concurrent override update for user=%s permission=%s, retrying",
                    user_id,
                    permission.name,
                )

        self._audit_log.record(
            AuditEntry.new(
                actor.business_id,
                actor.user_id,
                AuditAction.USER_OVERRIDE_SET,
                permission_name=permission.name,
                subject_user_id=user_id,
                reason=reason,
                details={
                    "override_id": str(override.id),
                    "is_allowed": is_allowed,
                    "expires_at": expires_at.isoformat() if expires_at else None,
                },
            )
        )
        return override
