"""PostgreSQL permission catalog repository."""

from psycopg import AsyncConnection

from tenantguard.domain.entities import Permission


class PostgresPermissionRepository:
    """Permission repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_all(self) -> list[Permission]:
        """List the whole catalog."""
        cur = await self._conn.execute(
            "SELECT id, name, category, resource_type, action, description "
            "FROM permission ORDER BY category, name"
        )
        rows = await cur.fetchall()
        return [
            Permission(
                id=r[0],
                name=r[1],
                category=r[2],
                resource_type=r[3],
                action=r[4],
                description=r[5],
            )
            for r in rows
        ]
