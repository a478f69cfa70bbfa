"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import psycopg
from psycopg import errors
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from tenantguard.application.ports import UnitOfWorkFactory
from tenantguard.domain.exceptions import ConstraintViolation, StoreUnavailable
from tenantguard.infrastructure.persistence.postgres.audit_repository import (
    PostgresAuditRepository,
)
from tenantguard.infrastructure.persistence.postgres.override_repository import (
    PostgresOverrideRepository,
)
from tenantguard.infrastructure.persistence.postgres.permission_repository import (
    PostgresPermissionRepository,
)
from tenantguard.infrastructure.persistence.postgres.role_repository import (
    PostgresRoleRepository,
)
from tenantguard.infrastructure.persistence.postgres.rule_repository import (
    PostgresRuleRepository,
)


class PostgresUnitOfWork:
    """PostgreSQL Unit of Work - one connection, one transaction."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._conn: object | None = None
        self._conn_cm: object | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = await self._conn_cm.__aenter__()
        self._permissions = PostgresPermissionRepository(self._conn)
        self._roles = PostgresRoleRepository(self._conn)
        self._overrides = PostgresOverrideRepository(self._conn)
        self._rules = PostgresRuleRepository(self._conn)
        self._audit = PostgresAuditRepository(self._conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type and self._conn:
            await self._conn.rollback()
        if self._conn_cm:
            await self._conn_cm.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def permissions(self) -> PostgresPermissionRepository:
        return self._permissions

    @property
    def roles(self) -> PostgresRoleRepository:
        return self._roles

    @property
    def overrides(self) -> PostgresOverrideRepository:
        return self._overrides

    @property
    def rules(self) -> PostgresRuleRepository:
        return self._rules

    @property
    def audit(self) -> PostgresAuditRepository:
        return self._audit

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(pool: AsyncConnectionPool) -> UnitOfWorkFactory:
    """Create UnitOfWork factory (async context manager).

    Connectivity failures surface as StoreUnavailable and unique-index
    conflicts as ConstraintViolation.
    """

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        try:
            uow = PostgresUnitOfWork(pool)
            async with uow:
                try:
                    yield uow
                    await uow.commit()
                except BaseException:
                    await uow.rollback()
                    raise
        except (PoolTimeout, psycopg.OperationalError) as e:
            raise StoreUnavailable("Database unavailable") from e
        except errors.UniqueViolation as e:
            raise ConstraintViolation(e.diag.message_primary or "Unique constraint violated") from e

    return factory
