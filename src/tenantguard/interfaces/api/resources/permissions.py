"""Permission catalog and evaluation API resources."""

import falcon.asgi

from tenantguard.application.use_cases.permission.evaluate_permission import (
    EvaluatePermissionUseCase,
)
from tenantguard.application.use_cases.permission.list_permissions import (
    ListPermissionCategoriesUseCase,
    ListPermissionsUseCase,
)
from tenantguard.domain.entities import Permission
from tenantguard.domain.exceptions import ValidationError
from tenantguard.domain.value_objects import AdminPermission, RequestContext
from tenantguard.interfaces.api.middleware.authorization import client_ip
from tenantguard.interfaces.api.resources.common import (
    current_subject,
    parse_datetime,
    read_body,
)


def permission_to_dict(p: Permission) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "category": p.category,
        "resource_type": p.resource_type,
        "action": p.action,
        "description": p.description,
    }


class PermissionsResource:
    """GET /v1/permissions - permission catalog."""

    required_permissions = {"GET": AdminPermission.PERMISSION_READ}

    def __init__(self, list_permissions: ListPermissionsUseCase) -> None:
        self._list = list_permissions

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        perms = await self._list.execute(category=req.get_param("category"))
        resp.media = {"items": [permission_to_dict(p) for p in perms]}
        resp.status = falcon.HTTP_200


class PermissionCategoriesResource:
    """GET /v1/permissions/categories - categories with counts."""

    required_permissions = {"GET": AdminPermission.PERMISSION_READ}

    def __init__(self, list_categories: ListPermissionCategoriesUseCase) -> None:
        self._list = list_categories

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        categories = await self._list.execute()
        resp.media = {
            "items": [
                {"name": c.name, "permission_count": c.permission_count} for c in categories
            ]
        }
        resp.status = falcon.HTTP_200


class AuthorizeResource:
    """POST /v1/authorize - evaluate a permission for a user of the caller's business.

    Body: ``{"user_id", "permission", "at"?, "timezone"?, "ip_address"?, "location"?}``.
    Context attributes that are not supplied default to the caller's request.
    """

    def __init__(self, evaluate_permission: EvaluatePermissionUseCase) -> None:
        self._evaluate = evaluate_permission

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        body = await read_body(req)
        context: RequestContext = req.context.request_context
        at = parse_datetime(body.get("at"), "at")
        if at is not None and at.tzinfo is None:
            raise ValidationError("at must include a timezone")
        target = RequestContext(
            at=at or context.at,
            timezone=body.get("timezone") or context.timezone,
            ip_address=body.get("ip_address") or client_ip(req),
            location=body.get("location") or context.location,
        )
        decision = await self._evaluate.execute(
            actor,
            context,
            body.get("user_id") or "",
            body.get("permission") or "",
            target_context=target,
        )
        resp.media = {
            "user_id": body.get("user_id"),
            "permission": body.get("permission"),
            **decision.to_dict(),
        }
        resp.status = falcon.HTTP_200
