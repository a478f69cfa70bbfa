"""Lifespan middleware - starts and stops long-lived components with the ASGI server."""

import logging
from typing import Any

from psycopg_pool import AsyncConnectionPool

from tenantguard.infrastructure.audit.queued_audit_log import QueuedAuditLog
from tenantguard.infrastructure.permission.catalog import CachedPermissionCatalog

logger = logging.getLogger(__name__)


class LifespanMiddleware:
    """Opens the pool, loads the catalog and starts the audit writer; reverses on shutdown."""

    def __init__(
        self,
        pool: AsyncConnectionPool,
        catalog: CachedPermissionCatalog,
        audit_log: QueuedAuditLog,
    ) -> None:
        self._pool = pool
        self._catalog = catalog
        self._audit_log = audit_log

    async def process_startup(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        await self._pool.open()
        await self._catalog.start()
        await self._audit_log.start()
        logger.info("Started")

    async def process_shutdown(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        # audit writer drains through the pool, so it stops first
        await self._audit_log.stop()
        await self._catalog.stop()
        await self._pool.close()
        logger.info("Stopped")
