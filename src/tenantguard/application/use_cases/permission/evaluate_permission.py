"""Evaluate permission use case - what-if check for another user."""

from tenantguard.application.ports import Authorizer
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.entities import Decision
from tenantguard.domain.exceptions import ValidationError
from tenantguard.domain.value_objects import AdminPermission, RequestContext, Subject


class EvaluatePermissionUseCase:
    """Resolve a permission for a user of the actor's business and return the full decision."""

    def __init__(self, authorizer: Authorizer, access_guard: AccessGuard) -> None:
        self._authorizer = authorizer
        self._guard = access_guard

    async def execute(
        self,
        actor: Subject,
        context: RequestContext,
        user_id: str,
        permission_name: str,
        target_context: RequestContext | None = None,
    ) -> Decision:
        """Evaluate ``permission_name`` for ``user_id`` within the actor's business."""
        await self._guard.require(actor, AdminPermission.PERMISSION_READ, context)
        if not user_id or not permission_name:
            raise ValidationError("user_id and permission are required")
        return await self._authorizer.authorize(
            user_id,
            actor.business_id,
            permission_name,
            target_context or context,
        )
