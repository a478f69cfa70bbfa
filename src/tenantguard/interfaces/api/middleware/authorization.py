"""Authorization gateway middleware.

Builds the RequestContext for every request and, for resources that declare
``required_permissions`` (HTTP method -> permission name), authorizes the
subject before the responder runs. Any authorization error rejects the
request.
"""

import logging

import falcon.asgi

from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.domain.exceptions import StoreUnavailable, TenantMismatch
from tenantguard.domain.value_objects import RequestContext

logger = logging.getLogger(__name__)


def client_ip(req: falcon.asgi.Request) -> str | None:
    """First X-Forwarded-For hop, else the peer address."""
    forwarded = req.get_header("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return req.remote_addr


class AuthorizationMiddleware:
    """Middleware that enforces declared permission requirements."""

    def __init__(self, access_guard: AccessGuard, timeout: float | None = None) -> None:
        self._guard = access_guard
        self._timeout = timeout

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        subject = getattr(req.context, "subject", None)
        req.context.request_context = RequestContext.now(
            timezone=subject.timezone if subject else "UTC",
            ip_address=client_ip(req),
            location=req.get_header("X-Location"),
        )

    async def process_resource(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, params
    ) -> None:
        required = getattr(resource, "required_permissions", None) or {}
        permission_name = required.get(req.method)
        if not permission_name:
            return

        subject = getattr(req.context, "subject", None)
        if not subject:
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            resp.complete = True
            return

        try:
            decision = await self._guard.check(
                subject, permission_name, req.context.request_context, timeout=self._timeout
            )
        except TenantMismatch:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied"}
            resp.complete = True
            return
        except StoreUnavailable:
            resp.status = falcon.HTTP_503
            resp.media = {"error": "Service temporarily unavailable"}
            resp.complete = True
            return

        if not decision.allowed:
            resp.status = falcon.HTTP_403
            resp.media = {"error": "Permission denied", "permission": permission_name}
            resp.complete = True
            return
        req.context.decision = decision
