from __future__ import annotations

import asyncio
import contextlib
import logging

from backend.application import PayrollService
from backend.core.errors import PayrollError

logger = logging.getLogger(__name__)


class SyncWorker:
    """Periodically re-checks the canonical store for out-of-band edits."""

    def __init__(self, service: PayrollService, interval: float = 5.0) -> None:
        self._service = service
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> bool:
        try:
            return await self._service.resync()
        except PayrollError as exc:
            logger.error("Real-time sync error: %s", exc)
            self._service.report_error(f"Real-time sync failed: {exc}")
            return False

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.tick()

    def start(self) -> None:
        if self._interval <= 0 or self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Real-time sync started (every %.1fs)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
