"""PostgreSQL business rule repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from tenantguard.domain.entities import BusinessRule
from tenantguard.domain.value_objects import (
    RuleEffect,
    SubjectRef,
    SubjectType,
    condition_type_of,
    parse_condition,
)

_COLUMNS = (
    "id, business_id, subject_type, subject_id, permission_id, condition_type, "
    "condition, effect, created_at, created_by, description"
)


def _row_to_rule(r: tuple) -> BusinessRule:
    return BusinessRule(
        id=r[0],
        business_id=r[1],
        subject=SubjectRef(SubjectType(r[2]), r[3]),
        permission_id=r[4],
        condition=parse_condition(r[5], r[6]),
        effect=RuleEffect(r[7]),
        created_at=r[8],
        created_by=r[9],
        description=r[10],
    )


class PostgresRuleRepository:
    """Business rule repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_for_subjects(
        self,
        business_id: UUID,
        subjects: list[SubjectRef],
        permission_id: UUID,
    ) -> list[BusinessRule]:
        """Rules attached to any of the subjects for permission (or for all permissions)."""
        if not subjects:
            return []
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM business_rule "
            "WHERE business_id = %s "
            "AND (permission_id IS NULL OR permission_id = %s) "
            "AND (subject_type || ':' || subject_id) = ANY(%s)",
            (business_id, permission_id, [str(s) for s in subjects]),
        )
        rows = await cur.fetchall()
        return [_row_to_rule(r) for r in rows]

    async def list_for_business(
        self,
        business_id: UUID,
        *,
        subject: SubjectRef | None = None,
        permission_id: UUID | None = None,
    ) -> list[BusinessRule]:
        """Rules of business with optional filters."""
        conditions = ["business_id = %s"]
        params: list[object] = [business_id]
        if subject is not None:
            conditions.append("subject_type = %s AND subject_id = %s")
            params.extend([subject.subject_type.value, subject.subject_id])
        if permission_id is not None:
            conditions.append("permission_id = %s")
            params.append(permission_id)
        where = " AND ".join(conditions)
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM business_rule WHERE {where} ORDER BY created_at",
            tuple(params),
        )
        rows = await cur.fetchall()
        return [_row_to_rule(r) for r in rows]

    async def get_by_id(self, business_id: UUID, rule_id: UUID) -> BusinessRule | None:
        """Get rule by id within business."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM business_rule WHERE id = %s AND business_id = %s",
            (rule_id, business_id),
        )
        r = await cur.fetchone()
        return _row_to_rule(r) if r else None

    async def create(self, rule: BusinessRule) -> BusinessRule:
        """Create rule."""
        await self._conn.execute(
            f"INSERT INTO business_rule ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                rule.id,
                rule.business_id,
                rule.subject.subject_type.value,
                rule.subject.subject_id,
                rule.permission_id,
                condition_type_of(rule.condition).value,
                Jsonb(rule.condition.to_payload()),
                rule.effect.value,
                rule.created_at,
                rule.created_by,
                rule.description,
            ),
        )
        return rule

    async def delete(self, business_id: UUID, rule_id: UUID) -> None:
        """Delete rule."""
        await self._conn.execute(
            "DELETE FROM business_rule WHERE id = %s AND business_id = %s",
            (rule_id, business_id),
        )
