"""User role assignment and override API resources."""

import falcon.asgi

from tenantguard.application.ports import PermissionCatalog
from tenantguard.application.use_cases.override.list_user_overrides import (
    ListUserOverridesUseCase,
)
from tenantguard.application.use_cases.override.revoke_user_override import (
    RevokeUserOverrideUseCase,
)
from tenantguard.application.use_cases.override.set_user_override import SetUserOverrideUseCase
from tenantguard.application.use_cases.role.assign_user_role import AssignUserRoleUseCase
from tenantguard.domain.entities import UserOverride
from tenantguard.domain.exceptions import ValidationError
from tenantguard.interfaces.api.resources.common import (
    current_subject,
    parse_datetime,
    parse_uuid,
    read_body,
)
from tenantguard.interfaces.api.resources.roles import role_to_dict


def _iso(value) -> str | None:
    return value.isoformat() if value else None


class UserRoleResource:
    """PUT /v1/users/{user_id}/role - set the user's role in the caller's business."""

    def __init__(self, assign_user_role: AssignUserRoleUseCase) -> None:
        self._assign = assign_user_role

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        body = await read_body(req)
        role = await self._assign.execute(
            actor,
            req.context.request_context,
            user_id,
            parse_uuid(body.get("role_id"), "role_id"),
        )
        resp.media = {"user_id": user_id, "role": role_to_dict(role)}
        resp.status = falcon.HTTP_200


class UserOverridesResource:
    """GET /v1/users/{user_id}/overrides - active overrides (``?include_inactive=true`` for history)."""

    def __init__(
        self, list_user_overrides: ListUserOverridesUseCase, catalog: PermissionCatalog
    ) -> None:
        self._list = list_user_overrides
        self._catalog = catalog

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        include_inactive = req.get_param_as_bool("include_inactive") or False
        items = await self._list.execute(
            actor, req.context.request_context, user_id, include_inactive=include_inactive
        )
        resp.media = {"items": [self._to_dict(o) for o in items]}
        resp.status = falcon.HTTP_200

    def _to_dict(self, o: UserOverride) -> dict:
        permission = self._catalog.get(o.permission_id)
        return override_to_dict(o, permission.name if permission else None)


class UserOverrideResource:
    """PUT/DELETE /v1/users/{user_id}/overrides/{permission_name}."""

    def __init__(
        self,
        set_user_override: SetUserOverrideUseCase,
        revoke_user_override: RevokeUserOverrideUseCase,
    ) -> None:
        self._set = set_user_override
        self._revoke = revoke_user_override

    async def on_put(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        user_id: str,
        permission_name: str,
    ) -> None:
        """Body: ``{"is_allowed": bool, "expires_at"?: ISO 8601, "reason"?: str}``."""
        actor = current_subject(req, resp)
        if not actor:
            return
        body = await read_body(req)
        is_allowed = body.get("is_allowed")
        if not isinstance(is_allowed, bool):
            raise ValidationError("is_allowed must be true or false")
        override = await self._set.execute(
            actor,
            req.context.request_context,
            user_id,
            permission_name,
            is_allowed,
            expires_at=parse_datetime(body.get("expires_at"), "expires_at"),
            reason=body.get("reason"),
        )
        resp.media = override_to_dict(override, permission_name)
        resp.status = falcon.HTTP_200

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        user_id: str,
        permission_name: str,
    ) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        await self._revoke.execute(actor, req.context.request_context, user_id, permission_name)
        resp.status = falcon.HTTP_204


def override_to_dict(o: UserOverride, permission_name: str | None) -> dict:
    return {
        "id": str(o.id),
        "user_id": o.user_id,
        "permission": permission_name,
        "is_allowed": o.is_allowed,
        "granted_by": o.granted_by,
        "granted_at": _iso(o.granted_at),
        "expires_at": _iso(o.expires_at),
        "is_active": o.is_active,
        "revoked_at": _iso(o.revoked_at),
        "revoked_by": o.revoked_by,
        "reason": o.reason,
    }
