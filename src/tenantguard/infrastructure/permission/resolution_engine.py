"""Resolution engine - combines role grants, user overrides and business rules.

Precedence, highest first:

1. matching contextual deny rule
2. active user override (allow or deny)
3. matching contextual allow rule
4. role grant
5. default deny

Unknown permissions are denied. Store failures, timeouts, unexpected lookup errors
and cross-tenant data raise AuthorizationError instead of producing a decision.
"""

import asyncio
import logging
from dataclasses import dataclass
from uuid import UUID

from tenantguard.application.ports import PermissionCatalog, UnitOfWorkFactory
from tenantguard.domain.entities import BusinessRule, Decision, Permission, Role, UserOverride
from tenantguard.domain.exceptions import StoreUnavailable, TenantMismatch
from tenantguard.domain.value_objects import (
    DecisionSource,
    RequestContext,
    RuleEffect,
    SubjectRef,
)
from tenantguard.infrastructure.metrics import (
    authorization_decisions_total,
    authorization_errors_total,
)

logger = logging.getLogger(__name__)


@dataclass
class ResolutionFacts:
    """Everything the stores know about one (user, business, permission)."""

    roles: list[Role]
    granted_by_role: bool
    override: UserOverride | None
    rules: list[BusinessRule]


def resolve(
    permission: Permission,
    facts: ResolutionFacts,
    context: RequestContext,
) -> Decision:
    """Apply precedence to already fetched facts. Pure; independent of store ordering."""
    at = context.at
    matching = sorted(
        (r for r in facts.rules if r.covers(permission.id) and r.matches(context)),
        key=lambda r: (r.created_at, str(r.id)),
    )

    deny = next((r for r in matching if r.effect is RuleEffect.DENY), None)
    if deny is not None:
        return Decision(
            allowed=False,
            source=DecisionSource.RULE,
            reason="denied by business rule",
            evaluated_at=at,
            matched_rule_id=deny.id,
        )

    if facts.override is not None:
        return Decision(
            allowed=facts.override.is_allowed,
            source=DecisionSource.OVERRIDE,
            reason="allowed by user override" if facts.override.is_allowed else "denied by user override",
            evaluated_at=at,
            override_id=facts.override.id,
        )

    allow = next((r for r in matching if r.effect is RuleEffect.ALLOW), None)
    if allow is not None:
        return Decision(
            allowed=True,
            source=DecisionSource.RULE,
            reason="allowed by business rule",
            evaluated_at=at,
            matched_rule_id=allow.id,
        )

    if facts.granted_by_role:
        return Decision(
            allowed=True,
            source=DecisionSource.ROLE,
            reason="granted by role",
            evaluated_at=at,
        )

    return Decision(
        allowed=False,
        source=DecisionSource.DEFAULT,
        reason="no grant",
        evaluated_at=at,
    )


class PermissionResolver:
    """Authorizer implementation backed by the role, override and rule stores."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        catalog: PermissionCatalog,
        *,
        timeout: float = 2.0,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._catalog = catalog
        self._timeout = timeout

    async def authorize(
        self,
        user_id: str,
        business_id: UUID,
        permission_name: str,
        context: RequestContext,
        *,
        timeout: float | None = None,
    ) -> Decision:
        """Decide whether ``user_id`` in ``business_id`` may use ``permission_name``."""
        try:
            permission = self._catalog.lookup(permission_name)
        except StoreUnavailable:
            authorization_errors_total.labels(kind="store_unavailable").inc()
            raise
        if permission is None:
            return self._count(
                Decision(
                    allowed=False,
                    source=DecisionSource.DEFAULT,
                    reason="unknown permission",
                    evaluated_at=context.at,
                )
            )

        try:
            async with asyncio.timeout(timeout if timeout is not None else self._timeout):
                facts = await self._fetch(user_id, business_id, permission.id, context)
        except TimeoutError as e:
            authorization_errors_total.labels(kind="timeout").inc()
            raise StoreUnavailable("Authorization lookups timed out") from e
        except StoreUnavailable:
            authorization_errors_total.labels(kind="store_unavailable").inc()
            raise
        except TenantMismatch:
            authorization_errors_total.labels(kind="tenant_mismatch").inc()
            raise
        except Exception as e:
            # Driver bugs, unreadable stored rules: still a hard deny.
            authorization_errors_total.labels(kind="internal").inc()
            logger.exception(
                "Authorization lookups failed for user=%s business=%s permission=%s",
                user_id,
                business_id,
                permission_name,
            )
            raise StoreUnavailable("Authorization lookups failed") from e

        return self._count(resolve(permission, facts, context))

    async def _fetch(
        self,
        user_id: str,
        business_id: UUID,
        permission_id: UUID,
        context: RequestContext,
    ) -> ResolutionFacts:
        roles, override = await _gather(
            self._roles_for_user(user_id, business_id),
            self._active_override(user_id, business_id, permission_id, context),
        )
        subjects = [SubjectRef.user(user_id)] + [SubjectRef.role(r.id) for r in roles]
        granted, rules = await _gather(
            self._granted_by_roles(roles, permission_id),
            self._rules(business_id, subjects, permission_id),
        )
        return ResolutionFacts(
            roles=roles,
            granted_by_role=granted,
            override=override,
            rules=rules,
        )

    async def _roles_for_user(self, user_id: str, business_id: UUID) -> list[Role]:
        async with self._uow_factory() as uow:
            roles = await uow.roles.list_for_user(user_id, business_id)
        for role in roles:
            if not role.visible_to(business_id):
                raise TenantMismatch("Role", business_id, role.business_id)
        return roles

    async def _granted_by_roles(self, roles: list[Role], permission_id: UUID) -> bool:
        if not roles:
            return False
        async with self._uow_factory() as uow:
            for role in roles:
                if permission_id in await uow.roles.get_permission_ids(role.id):
                    return True
        return False

    async def _active_override(
        self,
        user_id: str,
        business_id: UUID,
        permission_id: UUID,
        context: RequestContext,
    ) -> UserOverride | None:
        async with self._uow_factory() as uow:
            override = await uow.overrides.get_active(
                business_id, user_id, permission_id, context.at
            )
        if override is not None and override.business_id != business_id:
            raise TenantMismatch("Override", business_id, override.business_id)
        return override

    async def _rules(
        self,
        business_id: UUID,
        subjects: list[SubjectRef],
        permission_id: UUID,
    ) -> list[BusinessRule]:
        async with self._uow_factory() as uow:
            rules = await uow.rules.list_for_subjects(business_id, subjects, permission_id)
        for rule in rules:
            if rule.business_id != business_id:
                raise TenantMismatch("Rule", business_id, rule.business_id)
        return rules

    @staticmethod
    def _count(decision: Decision) -> Decision:
        authorization_decisions_total.labels(
            allowed=str(decision.allowed).lower(), source=decision.source.value
        ).inc()
        return decision


async def _gather(*aws):
    """Run lookups concurrently; wait for all, then surface the first failure."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    for r in results:
        if isinstance(r, BaseException):
            raise r
    return results
