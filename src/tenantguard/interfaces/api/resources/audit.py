"""Audit log API resource."""

import falcon.asgi

from tenantguard.application.dto.audit_query import AuditFilters
from tenantguard.application.use_cases.audit.list_audit_entries import ListAuditEntriesUseCase
from tenantguard.domain.entities import AuditEntry
from tenantguard.interfaces.api.resources.common import current_subject, parse_datetime


def entry_to_dict(e: AuditEntry) -> dict:
    return {
        "id": str(e.id),
        "timestamp": e.timestamp.isoformat(),
        "actor_user_id": e.actor_user_id,
        "action": e.action.value,
        "permission": e.permission_name,
        "subject_user_id": e.subject_user_id,
        "decision": e.decision.value if e.decision else None,
        "reason": e.reason,
        "details": e.details,
    }


class AuditResource:
    """GET /v1/audit - entries of the caller's business, newest first."""

    def __init__(self, list_audit_entries: ListAuditEntriesUseCase) -> None:
        self._list = list_audit_entries

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        actor = current_subject(req, resp)
        if not actor:
            return
        filters = AuditFilters(
            actor_user_id=req.get_param("actor_user_id"),
            subject_user_id=req.get_param("subject_user_id"),
            action=req.get_param("action"),
            permission_name=req.get_param("permission"),
            start=parse_datetime(req.get_param("start"), "start"),
            end=parse_datetime(req.get_param("end"), "end"),
        )
        page = await self._list.execute(
            actor,
            req.context.request_context,
            filters,
            cursor=req.get_param("cursor"),
            limit=req.get_param_as_int("limit") or 50,
        )
        resp.media = {
            "items": [entry_to_dict(e) for e in page.items],
            "next_cursor": page.next_cursor,
        }
        resp.status = falcon.HTTP_200
