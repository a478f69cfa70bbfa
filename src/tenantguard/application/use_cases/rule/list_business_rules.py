"""List business rules use case."""

from tenantguard.application.ports import PermissionCatalog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.entities import BusinessRule
from tenantguard.domain.exceptions import UnknownPermission, ValidationError
from tenantguard.domain.value_objects import (
    AdminPermission,
    RequestContext,
    Subject,
    SubjectRef,
    SubjectType,
)


class ListBusinessRulesUseCase:
    """Rules of the actor's business, optionally filtered by subject or permission."""

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
        self,
        actor: Subject,
        context: RequestContext,
        *,
        subject_type: str | None = None,
        subject_id: str | None = None,
        permission_name: str | None = None,
    ) -> list[BusinessRule]:
        await self._guard.require(actor, AdminPermission.RULE_READ, context)
        subject = None
        if subject_type or subject_id:
            if not (subject_type and subject_id):
                raise ValidationError("subject_type and subject_id must be given together")
            try:
                subject = SubjectRef(SubjectType(subject_type), subject_id)
            except ValueError as e:
                raise ValidationError(f"Invalid subject_type: {subject_type!r}") from e
        permission_id = None
        if permission_name:
            permission = self._catalog.lookup(permission_name)
            if permission is None:
                raise UnknownPermission(permission_name)
            permission_id = permission.id

        async with self._uow_factory() as uow:
            rules = await uow.rules.list_for_business(
                actor.business_id, subject=subject, permission_id=permission_id
            )
        return sorted(rules, key=lambda r: r.created_at)
