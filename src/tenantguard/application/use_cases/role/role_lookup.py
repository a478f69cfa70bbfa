"""Shared role lookup for role use cases."""

from uuid import UUID

from tenantguard.application.ports import UnitOfWork
from tenantguard.domain.entities import Role
from tenantguard.domain.exceptions import NotFound, ValidationError


async def load_role(
    uow: UnitOfWork, business_id: UUID, role_id: UUID, *, for_update: bool = False
) -> Role:
    """Get a role usable in ``business_id``.

    Roles of other businesses are reported as not found. System roles are
    visible everywhere but cannot be modified.
    """
    role = await uow.roles.get_by_id(role_id)
    if role is None or not role.visible_to(business_id):
        raise NotFound("Role", role_id)
    if for_update and role.is_system_role:
        raise ValidationError(f"System role '{role.name}' is read-only")
    return role
