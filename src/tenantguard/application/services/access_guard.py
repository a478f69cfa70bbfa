"""Access guard - request-path wrapper around the Authorizer.

Every caller that needs a yes/no answer (HTTP gateway middleware, administrative
use cases) goes through here so that denials, errors and audit submission are
handled the same way. Errors are never turned into an allow.
"""

import logging

from tenantguard.application.ports import AuditLog, Authorizer
from tenantguard.domain.entities import AuditEntry, Decision
from tenantguard.domain.exceptions import (
    AuthorizationError,
    PermissionDenied,
    TenantMismatch,
)
from tenantguard.domain.value_objects import (
    AuditAction,
    AuditDecision,
    RequestContext,
    Subject,
)

logger = logging.getLogger(__name__)


class AccessGuard:
    """Authorize a subject, audit the outcome, fail closed."""

    def __init__(
        self,
        authorizer: Authorizer,
        audit_log: AuditLog,
        *,
        record_allowed: bool = True,
    ) -> None:
        self._authorizer = authorizer
        self._audit_log = audit_log
        self._record_allowed = record_allowed

    async def check(
        self,
        subject: Subject,
        permission_name: str,
        context: RequestContext,
        *,
        timeout: float | None = None,
    ) -> Decision:
        """Return the decision. Re-raises AuthorizationError after auditing it."""
        try:
            decision = await self._authorizer.authorize(
                subject.user_id,
                subject.business_id,
                permission_name,
                context,
                timeout=timeout,
            )
        except TenantMismatch as e:
            logger.error(
                "Security anomaly: tenant mismatch for user=%s business=%s permission=%s: %s",
                subject.user_id,
                subject.business_id,
                permission_name,
                e,
            )
            self._submit(
                subject, permission_name, AuditAction.AUTHORIZE_TENANT_MISMATCH,
                AuditDecision.ERROR, str(e),
            )
            raise
        except AuthorizationError as e:
            logger.error(
                "Authorization failed closed for user=%s business=%s permission=%s: %s",
                subject.user_id,
                subject.business_id,
                permission_name,
                e,
            )
            self._submit(
                subject, permission_name, AuditAction.AUTHORIZE_ERROR,
                AuditDecision.ERROR, "authorization store unavailable",
            )
            raise

        if decision.allowed:
            logger.debug(
                "Permission granted user=%s permission=%s source=%s",
                subject.user_id,
                permission_name,
                decision.source,
            )
            if self._record_allowed:
                self._submit(
                    subject, permission_name, AuditAction.AUTHORIZE,
                    AuditDecision.ALLOW, decision.reason, decision,
                )
        else:
            logger.warning(
                "Permission denied user=%s business=%s permission=%s source=%s reason=%s",
                subject.user_id,
                subject.business_id,
                permission_name,
                decision.source,
                decision.reason,
            )
            self._submit(
                subject, permission_name, AuditAction.AUTHORIZE,
                AuditDecision.DENY, decision.reason, decision,
            )
        return decision

    async def require(
        self,
        subject: Subject,
        permission_name: str,
        context: RequestContext,
    ) -> Decision:
        """Like check, but raise PermissionDenied when not allowed."""
        decision = await self.check(subject, permission_name, context)
        if not decision.allowed:
            raise PermissionDenied(f"Missing permission: {permission_name}")
        return decision

    def _submit(
        self,
        subject: Subject,
        permission_name: str,
        action: AuditAction,
        outcome: AuditDecision,
        reason: str,
        decision: Decision | None = None,
    ) -> None:
        details: dict[str, object] = {}
        if decision is not None:
            details = {
                "source": decision.source.value,
                "matched_rule_id": str(decision.matched_rule_id) if decision.matched_rule_id else None,
                "override_id": str(decision.override_id) if decision.override_id else None,
            }
        entry = AuditEntry.new(
            subject.business_id,
            subject.user_id,
            action,
            permission_name=permission_name,
            subject_user_id=subject.user_id,
            decision=outcome,
            reason=reason,
            details=details,
        )
        # Audit problems must not change the decision.
        try:
            self._audit_log.record(entry)
        except Exception:
            logger.exception("Audit submission failed for entry %s", entry.id)
