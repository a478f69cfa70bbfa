"""PostgreSQL audit repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from tenantguard.application.dto.audit_query import AuditFilters, decode_cursor, encode_cursor
from tenantguard.domain.entities import AuditEntry
from tenantguard.domain.value_objects import AuditAction, AuditDecision

_COLUMNS = (
    "id, business_id, actor_user_id, action, permission_name, subject_user_id, "
    "decision, reason, details, created_at"
)


def _row_to_entry(r: tuple) -> AuditEntry:
    return AuditEntry(
        id=r[0],
        business_id=r[1],
        actor_user_id=r[2],
        action=AuditAction(r[3]),
        permission_name=r[4],
        subject_user_id=r[5],
        decision=AuditDecision(r[6]) if r[6] else None,
        reason=r[7],
        details=r[8] or {},
        timestamp=r[9],
    )


class PostgresAuditRepository:
    """Append-only audit repository."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def append(self, entry: AuditEntry) -> None:
        """Insert entry; a repeated id is ignored."""
        await self._conn.execute(
            f"INSERT INTO audit_entry ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s) "
            "ON CONFLICT (id) DO NOTHING",
            (
                entry.id,
                entry.business_id,
                entry.actor_user_id,
                entry.action.value,
                entry.permission_name,
                entry.subject_user_id,
                entry.decision.value if entry.decision else None,
                entry.reason,
                Jsonb(entry.details),
                entry.timestamp,
            ),
        )

    async def list(
        self,
        business_id: UUID,
        filters: AuditFilters,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[AuditEntry], str | None]:
        """List entries newest first with keyset pagination."""
        conditions = ["business_id = %s"]
        _params: list[object] = [business_id]
        for column, value in (
            ("actor_user_id", filters.actor_user_id),
            ("subject_user_id", filters.subject_user_id),
            ("action", filters.action),
            ("permission_name", filters.permission_name),
        ):
            if value:
                conditions.append(f"{column} = %s")
                _params.append(value)
        if filters.start:
            conditions.append("created_at >= %s")
            _params.append(filters.start)
        if filters.end:
            conditions.append("created_at <= %s")
            _params.append(filters.end)
        if cursor:
            ts, entry_id = decode_cursor(cursor)
            conditions.append("(created_at, id) < (%s, %s)")
            _params.extend([ts, entry_id])
        where = " AND ".join(conditions)
        params = tuple(_params) + (limit + 1,)
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM audit_entry WHERE {where} "
            "ORDER BY created_at DESC, id DESC LIMIT %s",
            params,
        )
        rows = await cur.fetchall()
        entries = [_row_to_entry(r) for r in rows[:limit]]
        next_cursor = encode_cursor(entries[-1]) if len(rows) > limit else None
        return entries, next_cursor
