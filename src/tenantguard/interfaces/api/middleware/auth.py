"""Auth middleware - resolves the session subject from a bearer token or trusted headers."""

import logging
from uuid import UUID

import falcon.asgi

from tenantguard.domain.value_objects import Subject

logger = logging.getLogger(__name__)


class AuthMiddleware:
    """Middleware that validates the bearer token and sets req.context.subject.

    ``req.context.subject`` is None when the request is not authenticated or
    the identity carries no valid business id.
    """

    def __init__(self, keycloak_provider=None, trust_identity_headers: bool = False) -> None:
        self._keycloak = keycloak_provider
        self._trust_headers = trust_identity_headers

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        req.context.subject = None
        auth = req.get_header("Authorization")
        if auth and auth.startswith("Bearer ") and self._keycloak:
            user = self._keycloak.decode_token(auth[7:])
            if user:
                req.context.subject = _subject(
                    user.user_id, user.business_id, user.role, user.timezone
                )
            return
        if self._trust_headers:
            req.context.subject = _subject(
                req.get_header("X-User-Id"),
                req.get_header("X-Business-Id"),
                req.get_header("X-User-Role"),
                req.get_header("X-Timezone"),
            )


def _subject(
    user_id: str | None,
    business_id: str | None,
    role: str | None,
    timezone: str | None,
) -> Subject | None:
    if not user_id or not business_id:
        return None
    try:
        bid = UUID(str(business_id))
    except ValueError:
        logger.warning("Ignoring identity with malformed business id for user=%s", user_id)
        return None
    return Subject(user_id=user_id, business_id=bid, role=role, timezone=timezone or "UTC")
