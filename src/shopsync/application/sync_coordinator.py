"""Sync coordinator: drains the pending queue against the remote store.

Guarantees at-least-once, ordered, sequential application:

* One drain pass at a time, guarded by an in-progress flag.  A second
  request while a pass is running is a no-op.
* Each pass works on a snapshot of the queue taken at its start.
  Operations enqueued during the pass wait for the next one.
* Operations are applied strictly one after another in queue order.
  Two deductions of the same item therefore compound correctly.
* A failed operation stays queued and the pass moves on.  The
  coordinator does not tell retryable from permanent failures; a
  permanently invalid operation retries until cleared by hand.
* If the monitor goes offline mid-pass, no further operations are
  started; the remainder stays queued.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from shopsync.application.connectivity import ConnectivityMonitor
from shopsync.application.dto import SyncReport
from shopsync.application.pending_queue import PendingOperationQueue
from shopsync.domain.model.operations import PendingOperation

logger = logging.getLogger(__name__)

ApplyFn = Callable[[PendingOperation], Awaitable[bool]]


class SyncCoordinator:

    def __init__(
        self,
        queue: PendingOperationQueue,
        monitor: ConnectivityMonitor,
        apply: ApplyFn,
    ) -> None:
        self._queue = queue
        self._monitor = monitor
        self._apply = apply
        self._draining = False
        self._scheduled: set[asyncio.Task] = set()
        self._last_report: SyncReport | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def is_draining(self) -> bool:
        return self._draining

    # --- Wiring ---------------------------------------------------------------

    def attach(self) -> None:
        """Start draining automatically on every ``offline -> online`` edge."""
        if self._unsubscribe is None:
            self._unsubscribe = self._monitor.on_online(self.request_drain)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def request_drain(self) -> None:
        """Schedule a drain pass on the running loop (used by the monitor)."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Drain requested without a running event loop; ignored")
            return
        task = loop.create_task(self.drain())
        self._scheduled.add(task)
        task.add_done_callback(self._drain_finished)

    async def wait_idle(self) -> SyncReport | None:
        """Wait for every scheduled drain and return the last report, if any.

        A scheduled drain that raised has already been logged and yields no
        report.
        """
        while self._scheduled:
            pending = set(self._scheduled)
            await asyncio.gather(*pending, return_exceptions=True)
            self._scheduled -= pending
        report, self._last_report = self._last_report, None
        return report

    def _drain_finished(self, task: asyncio.Task) -> None:
        self._scheduled.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Scheduled sync pass failed", exc_info=exc)
            return
        report = task.result()
        if report.started:
            self._last_report = report

    # --- Drain ----------------------------------------------------------------

    async def drain(self) -> SyncReport:
        if self._draining:
            logger.debug("Drain already in progress; request ignored")
            return SyncReport(started=False)
        if not self._monitor.is_online():
            logger.debug("Offline; drain not started")
            return SyncReport(started=False)

        self._draining = True
        try:
            report = await self._drain_snapshot()
        finally:
            self._draining = False

        if report.success_count or report.failure_count:
            logger.info(
                "Sync pass finished: %d applied, %d failed%s",
                report.success_count,
                report.failure_count,
                " (interrupted by going offline)" if report.interrupted else "",
            )
        return report

    async def _drain_snapshot(self) -> SyncReport:
        pending = await self._queue.list_pending()
        success = 0
        failed = 0
        interrupted = False

        for operation in pending:
            if not self._monitor.is_online():
                interrupted = True
                break

            if await self._apply_one(operation):
                await self._queue.resolve(operation.id)
                success += 1
            else:
                failed += 1

        return SyncReport(
            success_count=success,
            failure_count=failed,
            interrupted=interrupted,
        )

    async def _apply_one(self, operation: PendingOperation) -> bool:
        # Errors from a single operation are counted, never raised past the drain.
        try:
            applied = await self._apply(operation)
        except Exception as exc:
            logger.warning(
                "Operation #%s (%s) failed and stays queued: %s",
                operation.id,
                operation.type.value,
                exc,
            )
            return False
        if not applied:
            logger.warning(
                "Operation #%s (%s) was rejected and stays queued",
                operation.id,
                operation.type.value,
            )
        return bool(applied)
