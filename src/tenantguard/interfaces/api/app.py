"""Falcon ASGI application."""

import falcon.asgi
from falcon.asgi import App

from tenantguard.application.ports import AuditLog, Authorizer, PermissionCatalog, UnitOfWorkFactory
from tenantguard.application.services.access_guard import AccessGuard
from tenantguard.application.use_cases.audit.list_audit_entries import ListAuditEntriesUseCase
from tenantguard.application.use_cases.override.list_user_overrides import (
    ListUserOverridesUseCase,
)
from tenantguard.application.use_cases.override.revoke_user_override import (
    RevokeUserOverrideUseCase,
)
from tenantguard.application.use_cases.override.set_user_override import SetUserOverrideUseCase
from tenantguard.application.use_cases.permission.evaluate_permission import (
    EvaluatePermissionUseCase,
)
from tenantguard.application.use_cases.permission.list_permissions import (
    ListPermissionCategoriesUseCase,
    ListPermissionsUseCase,
)
from tenantguard.application.use_cases.role.assign_user_role import AssignUserRoleUseCase
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
from tenantguard.application.use_cases.rule.create_business_rule import (
    CreateBusinessRuleUseCase,
)
from tenantguard.application.use_cases.rule.delete_business_rule import (
    DeleteBusinessRuleUseCase,
)
from tenantguard.application.use_cases.rule.list_business_rules import ListBusinessRulesUseCase
from tenantguard.interfaces.api.errors import register_error_handlers
from tenantguard.interfaces.api.middleware.authorization import AuthorizationMiddleware
from tenantguard.interfaces.api.resources.audit import AuditResource
from tenantguard.interfaces.api.resources.health import HealthResource
from tenantguard.interfaces.api.resources.metrics import MetricsResource
from tenantguard.interfaces.api.resources.permissions import (
    AuthorizeResource,
    PermissionCategoriesResource,
    PermissionsResource,
)
from tenantguard.interfaces.api.resources.roles import (
    RolePermissionResource,
    RolePermissionsResource,
    RoleResource,
    RolesResource,
)
from tenantguard.interfaces.api.resources.rules import BusinessRuleResource, BusinessRulesResource
from tenantguard.interfaces.api.resources.users import (
    UserOverrideResource,
    UserOverridesResource,
    UserRoleResource,
)


def create_app(
    unit_of_work_factory: UnitOfWorkFactory,
    catalog: PermissionCatalog,
    authorizer: Authorizer,
    audit_log: AuditLog,
    *,
    middleware: list | None = None,
    pool=None,
    record_allowed: bool = True,
    authorize_timeout: float | None = None,
) -> App:
    """Wire use cases and resources into a Falcon ASGI app.

    ``middleware`` runs before the authorization gateway; it must set
    ``req.context.subject`` (see AuthMiddleware).
    """
    uow = unit_of_work_factory
    guard = AccessGuard(authorizer, audit_log, record_allowed=record_allowed)

    app = falcon.asgi.App(
        middleware=[
            *(middleware or []),
            AuthorizationMiddleware(guard, timeout=authorize_timeout),
        ],
    )
    register_error_handlers(app)

    health = HealthResource(pool, catalog)
    app.add_route("/v1/health", health)
    app.add_route("/v1/health/ready", health, suffix="ready")
    app.add_route("/v1/metrics", MetricsResource())

    app.add_route(
        "/v1/permissions", PermissionsResource(ListPermissionsUseCase(catalog))
    )
    app.add_route(
        "/v1/permissions/categories",
        PermissionCategoriesResource(ListPermissionCategoriesUseCase(catalog)),
    )
    app.add_route(
        "/v1/authorize", AuthorizeResource(EvaluatePermissionUseCase(authorizer, guard))
    )

    app.add_route(
        "/v1/roles",
        RolesResource(ListRolesUseCase(uow, guard), CreateRoleUseCase(uow, guard, audit_log)),
    )
    app.add_route("/v1/roles/{role_id}", RoleResource(DeleteRoleUseCase(uow, guard, audit_log)))
    app.add_route(
        "/v1/roles/{role_id}/permissions",
        RolePermissionsResource(
            GetRolePermissionsUseCase(uow, catalog, guard),
            ReplaceRolePermissionsUseCase(uow, catalog, guard, audit_log),
        ),
    )
    app.add_route(
        "/v1/roles/{role_id}/permissions/{permission_name}",
        RolePermissionResource(
            GrantPermissionUseCase(uow, catalog, guard, audit_log),
            RevokePermissionUseCase(uow, catalog, guard, audit_log),
        ),
    )

    app.add_route(
        "/v1/users/{user_id}/role", UserRoleResource(AssignUserRoleUseCase(uow, guard, audit_log))
    )
    app.add_route(
        "/v1/users/{user_id}/overrides",
        UserOverridesResource(ListUserOverridesUseCase(uow, guard), catalog),
    )
    app.add_route(
        "/v1/users/{user_id}/overrides/{permission_name}",
        UserOverrideResource(
            SetUserOverrideUseCase(uow, catalog, guard, audit_log),
            RevokeUserOverrideUseCase(uow, catalog, guard, audit_log),
        ),
    )

    app.add_route(
        "/v1/rules",
        BusinessRulesResource(
            ListBusinessRulesUseCase(uow, catalog, guard),
            CreateBusinessRuleUseCase(uow, catalog, guard, audit_log),
            catalog,
        ),
    )
    app.add_route(
        "/v1/rules/{rule_id}", BusinessRuleResource(DeleteBusinessRuleUseCase(uow, guard, audit_log))
    )
    app.add_route("/v1/audit", AuditResource(ListAuditEntriesUseCase(uow, guard)))
    return app
