"""PostgreSQL role repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from tenantguard.domain.entities import Role

_COLUMNS = "r.id, r.business_id, r.name, r.description, r.is_system_role"


def _row_to_role(r: tuple) -> Role:
    return Role(
        id=r[0],
        business_id=r[1],
        name=r[2],
        description=r[3] or "",
        is_system_role=r[4],
    )


class PostgresRoleRepository:
    """Role repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, role_id: UUID) -> Role | None:
        """Get role by id."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM role r WHERE r.id = %s",
            (role_id,),
        )
        r = await cur.fetchone()
        return _row_to_role(r) if r else None

    async def get_by_name(self, business_id: UUID, name: str) -> Role | None:
        """Get business role (or system role) by name."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM role r "
            "WHERE r.name = %s AND (r.business_id = %s OR r.business_id IS NULL) "
            "ORDER BY r.business_id NULLS LAST LIMIT 1",
            (name, business_id),
        )
        r = await cur.fetchone()
        return _row_to_role(r) if r else None

    async def list_for_business(self, business_id: UUID) -> list[Role]:
        """Roles of the business plus system roles."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM role r "
            "WHERE r.business_id = %s OR r.business_id IS NULL ORDER BY r.name",
            (business_id,),
        )
        rows = await cur.fetchall()
        return [_row_to_role(r) for r in rows]

    async def list_for_user(self, user_id: str, business_id: UUID) -> list[Role]:
        """Roles assigned to the user in the business.

        The role's own business is returned as stored so callers can detect
        assignments that point at another tenant's role.
        """
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM user_role ur JOIN role r ON r.id = ur.role_id "
            "WHERE ur.user_id = %s AND ur.business_id = %s",
            (user_id, business_id),
        )
        rows = await cur.fetchall()
        return [_row_to_role(r) for r in rows]

    async def get_permission_ids(self, role_id: UUID) -> set[UUID]:
        """Permission ids granted to role."""
        cur = await self._conn.execute(
            "SELECT permission_id FROM role_permission WHERE role_id = %s",
            (role_id,),
        )
        rows = await cur.fetchall()
        return {r[0] for r in rows}

    async def grant(self, role_id: UUID, permission_id: UUID) -> bool:
        """Insert grant if missing. Returns True when a row was added."""
        cur = await self._conn.execute(
            "INSERT INTO role_permission (role_id, permission_id) VALUES (%s, %s) "
            "ON CONFLICT (role_id, permission_id) DO NOTHING",
            (role_id, permission_id),
        )
        return cur.rowcount == 1

    async def revoke(self, role_id: UUID, permission_id: UUID) -> bool:
        """Delete grant if present. Returns True when a row was removed."""
        cur = await self._conn.execute(
            "DELETE FROM role_permission WHERE role_id = %s AND permission_id = %s",
            (role_id, permission_id),
        )
        return cur.rowcount == 1

    async def replace_permissions(self, role_id: UUID, permission_ids: set[UUID]) -> None:
        """Replace all grants of role."""
        await self._conn.execute(
            "DELETE FROM role_permission WHERE role_id = %s",
            (role_id,),
        )
        if not permission_ids:
            return
        async with self._conn.cursor() as cur:
            await cur.executemany(
                "INSERT INTO role_permission (role_id, permission_id) VALUES (%s, %s) "
                "ON CONFLICT (role_id, permission_id) DO NOTHING",
                [(role_id, pid) for pid in permission_ids],
            )

    async def create(self, role: Role) -> Role:
        """Create role."""
        await self._conn.execute(
            "INSERT INTO role (id, business_id, name, description, is_system_role) "
            "VALUES (%s, %s, %s, %s, %s)",
            (role.id, role.business_id, role.name, role.description, role.is_system_role),
        )
        return role

    async def delete(self, role_id: UUID) -> None:
        """Delete non-system role and the rules attached to it."""
        await self._conn.execute(
            "DELETE FROM business_rule WHERE subject_type = 'role' AND subject_id = %s",
            (str(role_id),),
        )
        await self._conn.execute(
            "DELETE FROM role WHERE id = %s AND NOT is_system_role",
            (role_id,),
        )

    async def assign_user(self, user_id: str, business_id: UUID, role_id: UUID) -> None:
        """Make role_id the user's only role in the business."""
        await self._conn.execute(
            "DELETE FROM user_role WHERE user_id = %s AND business_id = %s",
            (user_id, business_id),
        )
        await self._conn.execute(
            "INSERT INTO user_role (user_id, business_id, role_id, assigned_at) "
            "VALUES (%s, %s, %s, NOW())",
            (user_id, business_id, role_id),
        )
