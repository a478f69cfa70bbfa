"""Authorizer port - the single authorization contract."""

from typing import Protocol
from uuid import UUID

from tenantguard.domain.entities import Decision
from tenantguard.domain.value_objects import RequestContext


class Authorizer(Protocol):
    """Decides whether a user in a business may use a permission.

    Returns a Decision, or raises AuthorizationError when no decision can be
    made. Callers must treat the error as a deny.
    """

    async def authorize(
        self,
        user_id: str,
        business_id: UUID,
        permission_name: str,
        context: RequestContext,
        *,
        timeout: float | None = None,
    ) -> Decision: ...
