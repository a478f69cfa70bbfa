"""Business rule API resources."""

import falcon.asgi

from tenantguard.application.ports import PermissionCatalog
from tenantguard.application.use_cases.rule.create_business_rule import (
    CreateBusinessRuleUseCase,
)
from tenantguard.application.use_cases.rule.delete_business_rule import (
    DeleteBusinessRuleUseCase,
)
from tenantguard.application.use_cases.rule.list_business_rules import ListBusinessRulesUseCase
from tenantguard.domain.entities import BusinessRule
from tenantguard.domain.value_objects import condition_type_of
from tenantguard.interfaces.api.resources.common import current_subject, parse_uuid, read_body


class BusinessRulesResource:
    """GET/POST /v1/rules - list and create contextual rules."""

    def __init__(
        self,
        list_rules: ListBusinessRulesUseCase,
        create_rule: CreateBusinessRuleUseCase,
        catalog: PermissionCatalog,
    ) -> None:
        self._list = list_rules
        self._create = create_rule
        self._catalog = catalog

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        rules = await self._list.execute(
            actor,
            req.context.request_context,
            subject_type=req.get_param("subject_type"),
            subject_id=req.get_param("subject_id"),
            permission_name=req.get_param("permission"),
        )
        resp.media = {"items": [self._to_dict(r) for r in rules]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Body: ``{"subject_type", "subject_id", "condition_type", "condition", "effect",
        "permission"?, "description"?}``."""
        actor = current_subject(req, resp)
        if not actor:
            return
        body = await read_body(req)
        rule = await self._create.execute(
            actor,
            req.context.request_context,
            subject_type=body.get("subject_type") or "",
            subject_id=str(body.get("subject_id") or ""),
            condition_type=body.get("condition_type") or "",
            condition=body.get("condition"),
            effect=body.get("effect") or "",
            permission_name=body.get("permission"),
            description=body.get("description"),
        )
        resp.media = self._to_dict(rule)
        resp.status = falcon.HTTP_201

    def _to_dict(self, r: BusinessRule) -> dict:
        permission = self._catalog.get(r.permission_id) if r.permission_id else None
        return {
            "id": str(r.id),
            "subject_type": r.subject.subject_type.value,
            "subject_id": r.subject.subject_id,
            "permission": permission.name if permission else None,
            "condition_type": condition_type_of(r.condition).value,
            "condition": r.condition.to_payload(),
            "effect": r.effect.value,
            "description": r.description,
            "created_by": r.created_by,
            "created_at": r.created_at.isoformat(),
        }


class BusinessRuleResource:
    """DELETE /v1/rules/{rule_id}."""

    def __init__(self, delete_rule: DeleteBusinessRuleUseCase) -> None:
        self._delete = delete_rule

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, rule_id: str
    ) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        await self._delete.execute(
            actor, req.context.request_context, parse_uuid(rule_id, "rule ID")
        )
        resp.status = falcon.HTTP_204
