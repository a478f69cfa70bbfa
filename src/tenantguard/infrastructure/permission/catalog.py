"""Cached permission catalog with background refresh."""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from types import MappingProxyType
from uuid import UUID

from tenantguard.application.ports import UnitOfWorkFactory
from tenantguard.domain.entities import Permission
from tenantguard.domain.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    by_name: MappingProxyType
    by_id: MappingProxyType

    @classmethod
    def build(cls, permissions: list[Permission]) -> "_Snapshot":
        return cls(
            by_name=MappingProxyType({p.name: p for p in permissions}),
            by_id=MappingProxyType({p.id: p for p in permissions}),
        )


class CachedPermissionCatalog:
    """Read-mostly catalog. Refresh builds a new snapshot and swaps the reference,
    so readers never wait and never see a half-built map."""

    def __init__(
        self, unit_of_work_factory: UnitOfWorkFactory, refresh_interval: float = 300.0
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._refresh_interval = refresh_interval
        self._snapshot: _Snapshot | None = None
        self._task: asyncio.Task | None = None

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    async def load(self) -> None:
        """Read all permissions and publish a new snapshot."""
        async with self._uow_factory() as uow:
            permissions = await uow.permissions.list_all()
        self._snapshot = _Snapshot.build(permissions)
        logger.info("Permission catalog loaded (%d permissions)", len(permissions))

    def lookup(self, name: str) -> Permission | None:
        return self._current().by_name.get(name)

    def get(self, permission_id: UUID) -> Permission | None:
        return self._current().by_id.get(permission_id)

    def all(self) -> list[Permission]:
        return list(self._current().by_name.values())

    async def start(self) -> None:
        """Initial load and background refresh. A failed initial load is retried by the loop."""
        try:
            await self.load()
        except Exception:
            logger.exception("Initial permission catalog load failed")
        if self._task is None:
            self._task = asyncio.create_task(self._refresh_loop(), name="catalog-refresh")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self._refresh_interval)
            try:
                await self.load()
            except Exception:
                logger.exception("Permission catalog refresh failed, keeping previous snapshot")

    def _current(self) -> _Snapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise StoreUnavailable("Permission catalog not loaded")
        return snapshot
