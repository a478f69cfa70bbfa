"""PostgreSQL user override repository implementation."""

from datetime import datetime
from uuid import UUID

from psycopg import AsyncConnection

from tenantguard.domain.entities import UserOverride

_COLUMNS = (
    "id, business_id, user_id, permission_id, is_allowed, granted_by, granted_at, "
    "expires_at, is_active, revoked_at, revoked_by, reason"
)


def _row_to_override(r: tuple) -> UserOverride:
    return UserOverride(
        id=r[0],
        business_id=r[1],
        user_id=r[2],
        permission_id=r[3],
        is_allowed=r[4],
        granted_by=r[5],
        granted_at=r[6],
        expires_at=r[7],
        is_active=r[8],
        revoked_at=r[9],
        revoked_by=r[10],
        reason=r[11],
    )


class PostgresOverrideRepository:
    """User override repository implementation.

    The partial unique index ``ux_user_override_active`` allows one active row
    per (business_id, user_id, permission_id).
    """

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_active(
        self, business_id: UUID, user_id: str, permission_id: UUID, as_of: datetime
    ) -> UserOverride | None:
        """Active override that has not expired at ``as_of``."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM user_override "
            "WHERE business_id = %s AND user_id = %s AND permission_id = %s "
            "AND is_active AND (expires_at IS NULL OR expires_at > %s) "
            "ORDER BY granted_at DESC LIMIT 1",
            (business_id, user_id, permission_id, as_of),
        )
        r = await cur.fetchone()
        return _row_to_override(r) if r else None

    async def replace_active(self, override: UserOverride) -> UserOverride:
        """Deactivate the current active override for the pair and insert the new one."""
        # Serialize writers of the same pair for the rest of the transaction.
        await self._conn.execute(
            "SELECT pg_advisory_xact_lock(hashtextextended(%s, 0))",
            (f"{override.business_id}:{override.user_id}:{override.permission_id}",),
        )
        await self._conn.execute(
            "UPDATE user_override SET is_active = FALSE, revoked_at = %s, revoked_by = %s "
            "WHERE business_id = %s AND user_id = %s AND permission_id = %s AND is_active",
            (
                override.granted_at,
                override.granted_by,
                override.business_id,
                override.user_id,
                override.permission_id,
            ),
        )
        await self._conn.execute(
            f"INSERT INTO user_override ({_COLUMNS}) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                override.id,
                override.business_id,
                override.user_id,
                override.permission_id,
                override.is_allowed,
                override.granted_by,
                override.granted_at,
                override.expires_at,
                True,
                None,
                None,
                override.reason,
            ),
        )
        return override

    async def deactivate(
        self,
        business_id: UUID,
        user_id: str,
        permission_id: UUID,
        revoked_by: str,
        revoked_at: datetime,
    ) -> UserOverride | None:
        """Mark the active override inactive. Returns it, or None if there was none."""
        cur = await self._conn.execute(
            "UPDATE user_override SET is_active = FALSE, revoked_at = %s, revoked_by = %s "
            "WHERE business_id = %s AND user_id = %s AND permission_id = %s AND is_active "
            f"RETURNING {_COLUMNS}",
            (revoked_at, revoked_by, business_id, user_id, permission_id),
        )
        r = await cur.fetchone()
        return _row_to_override(r) if r else None

    async def list_for_user(
        self, business_id: UUID, user_id: str, include_inactive: bool = False
    ) -> list[UserOverride]:
        """Overrides of user, active only unless include_inactive."""
        q = f"SELECT {_COLUMNS} FROM user_override WHERE business_id = %s AND user_id = %s"
        if not include_inactive:
            q += " AND is_active"
        q += " ORDER BY granted_at DESC"
        cur = await self._conn.execute(q, (business_id, user_id))
        rows = await cur.fetchall()
        return [_row_to_override(r) for r in rows]
