"""Role API resources."""

import falcon.asgi

from tenantguard.application.use_cases.role.create_role import CreateRoleUseCase
from tenantguard.application.use_cases.role.delete_role import DeleteRoleUseCase
from tenantguard.application.use_cases.role.get_role_permissions import (
    GetRolePermissionsUseCase,
)
from tenantguard.application.use_cases.role.grant_permission import GrantPermissionUseCase
from tenantguard.application.use_cases.role.list_roles import ListRolesUseCase
from tenantguard.application.use_cases.role.replace_role_permissions import (
    ReplaceRolePermissionsUseCase,
)
from tenantguard.application.use_cases.role.revoke_permission import RevokePermissionUseCase
from tenantguard.domain.entities import Role
from tenantguard.domain.exceptions import ValidationError
from tenantguard.interfaces.api.resources.common import current_subject, parse_uuid, read_body
from tenantguard.interfaces.api.resources.permissions import permission_to_dict


def role_to_dict(r: Role) -> dict:
    return {
        "id": str(r.id),
        "business_id": str(r.business_id) if r.business_id else None,
        "name": r.name,
        "description": r.description,
        "is_system_role": r.is_system_role,
    }


class RolesResource:
    """GET/POST /v1/roles - list and create roles."""

    def __init__(self, list_roles: ListRolesUseCase, create_role: CreateRoleUseCase) -> None:
        self._list = list_roles
        self._create = create_role

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        roles = await self._list.execute(actor, req.context.request_context)
        resp.media = {"items": [role_to_dict(r) for r in roles]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        body = await read_body(req)
        role = await self._create.execute(
            actor,
            req.context.request_context,
            body.get("name") or "",
            body.get("description") or "",
        )
        resp.media = role_to_dict(role)
        resp.status = falcon.HTTP_201


class RoleResource:
    """DELETE /v1/roles/{role_id}."""

    def __init__(self, delete_role: DeleteRoleUseCase) -> None:
        self._delete = delete_role

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        await self._delete.execute(
            actor, req.context.request_context, parse_uuid(role_id, "role ID")
        )
        resp.status = falcon.HTTP_204


class RolePermissionsResource:
    """GET/PUT /v1/roles/{role_id}/permissions - list or replace a role's grants."""

    def __init__(
        self,
        get_role_permissions: GetRolePermissionsUseCase,
        replace_role_permissions: ReplaceRolePermissionsUseCase,
    ) -> None:
        self._get = get_role_permissions
        self._replace = replace_role_permissions

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        perms = await self._get.execute(
            actor, req.context.request_context, parse_uuid(role_id, "role ID")
        )
        resp.media = {"items": [permission_to_dict(p) for p in perms]}
        resp.status = falcon.HTTP_200

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        """Body: ``{"permissions": ["customer:read", ...]}``."""
        actor = current_subject(req, resp)
        if not actor:
            return
        body = await read_body(req)
        names = body.get("permissions")
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ValidationError("permissions must be a list of permission names")
        rid = parse_uuid(role_id, "role ID")
        context = req.context.request_context
        await self._replace.execute(actor, context, rid, names)
        perms = await self._get.execute(actor, context, rid)
        resp.media = {"items": [permission_to_dict(p) for p in perms]}
        resp.status = falcon.HTTP_200


class RolePermissionResource:
    """PUT/DELETE /v1/roles/{role_id}/permissions/{permission_name} - grant or revoke one."""

    def __init__(
        self,
        grant_permission: GrantPermissionUseCase,
        revoke_permission: RevokePermissionUseCase,
    ) -> None:
        self._grant = grant_permission
        self._revoke = revoke_permission

    async def on_put(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        role_id: str,
        permission_name: str,
    ) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        created = await self._grant.execute(
            actor, req.context.request_context, parse_uuid(role_id, "role ID"), permission_name
        )
        resp.media = {"role_id": role_id, "permission": permission_name, "granted": True}
        resp.status = falcon.HTTP_201 if created else falcon.HTTP_200

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        role_id: str,
        permission_name: str,
    ) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        await self._revoke.execute(
            actor, req.context.request_context, parse_uuid(role_id, "role ID"), permission_name
        )
        resp.status = falcon.HTTP_204
