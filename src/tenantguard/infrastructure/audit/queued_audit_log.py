"""Audit log backed by a bounded in-process queue and a background writer.

``record`` never blocks: when the queue is full the entry is dropped and
counted. The writer retries failed inserts with exponential backoff; inserts
are idempotent on the entry id, so a retry after an unacknowledged commit
does not create a second row.
"""

import asyncio
import contextlib
import logging

from tenantguard.application.ports import UnitOfWorkFactory
from tenantguard.domain.entities import AuditEntry
from tenantguard.infrastructure.metrics import (
    audit_entries_dropped_total,
    audit_entries_written_total,
)

logger = logging.getLogger(__name__)


class QueuedAuditLog:
    """Fire-and-forget AuditLog implementation."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        *,
        max_size: int = 10_000,
        max_retries: int = 5,
        retry_base_delay: float = 0.5,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._queue: asyncio.Queue[AuditEntry] = asyncio.Queue(maxsize=max_size)
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._worker: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def record(self, entry: AuditEntry) -> None:
        """Queue an entry for persistence."""
        try:
            self._queue.put_nowait(entry)
        except asyncio.QueueFull:
            audit_entries_dropped_total.labels(reason="queue_full").inc()
            logger.warning(
                "Audit queue full, dropping entry %s action=%s business=%s",
                entry.id,
                entry.action,
                entry.business_id,
            )

    async def start(self) -> None:
        if self._worker is None:
            self._worker = asyncio.create_task(self._run(), name="audit-writer")

    async def flush(self) -> None:
        """Wait until every queued entry has been handled."""
        await self._queue.join()

    async def stop(self, drain_timeout: float = 10.0) -> None:
        """Drain the queue (bounded by ``drain_timeout``) and stop the writer."""
        if self._worker is None:
            return
        try:
            async with asyncio.timeout(drain_timeout):
                await self._queue.join()
        except TimeoutError:
            logger.error("Audit writer stopped with %d entries unwritten", self._queue.qsize())
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None

    async def _run(self) -> None:
        while True:
            entry = await self._queue.get()
            try:
                await self._write(entry)
            finally:
                self._queue.task_done()

    async def _write(self, entry: AuditEntry) -> None:
        delay = self._retry_base_delay
        for attempt in range(1, self._max_retries + 2):
            try:
                async with self._uow_factory() as uow:
                    await uow.audit.append(entry)
            except Exception as e:
                if attempt > self._max_retries:
                    audit_entries_dropped_total.labels(reason="write_failed").inc()
                    logger.error(
                        "Giving up on audit entry %s after %d attempts: %s",
                        entry.id,
                        attempt,
                        e,
                    )
                    return
                logger.warning(
                    "Audit write failed for %s (attempt %d), retrying in %.1fs: %s",
                    entry.id,
                    attempt,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)
                delay *= 2
            else:
                audit_entries_written_total.inc()
                return
