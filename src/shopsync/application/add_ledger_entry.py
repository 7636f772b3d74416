"""Application service: Add Ledger Entry (khata) use case."""

from __future__ import annotations

import logging
from datetime import date

from shopsync.application.connectivity import ConnectivityMonitor
from shopsync.application.pending_queue import PendingOperationQueue
from shopsync.domain.exceptions import (
    ApplyFailedError,
    RemoteUnavailableError,
    ValidationError,
)
from shopsync.domain.model.operations import LedgerEntry, LedgerEntryType, OperationType
from shopsync.domain.model.value_objects import Money
from shopsync.domain.repository.remote_adapter import RemoteAdapter

logger = logging.getLogger(__name__)


class AddLedgerEntryHandler:

    def __init__(
        self,
        queue: PendingOperationQueue,
        monitor: ConnectivityMonitor,
        remote: RemoteAdapter,
    ) -> None:
        self._queue = queue
        self._monitor = monitor
        self._remote = remote

    async def handle(
        self,
        customer_name: str,
        entry_type: str,
        amount: str,
        description: str = "",
    ) -> bool:
        """Record a credit or payment.  Returns True if it was queued."""
        try:
            kind = LedgerEntryType(entry_type.strip().upper())
        except ValueError:
            raise ValidationError(
                f"Unknown entry type '{entry_type}' (expected CREDIT or PAYMENT)"
            ) from None

        entry = LedgerEntry(
            customer_name=customer_name.strip(),
            entry_type=kind,
            amount=Money.of(amount),
            description=description,
            date=date.today().isoformat(),
        )

        if self._monitor.is_online():
            try:
                if not await self._remote.apply_ledger_entry(entry):
                    raise ApplyFailedError("Remote store rejected the ledger entry")
                return False
            except RemoteUnavailableError as exc:
                logger.warning("Remote unreachable, queuing ledger entry: %s", exc)
                self._monitor.set_online(False)

        await self._queue.enqueue(OperationType.ADD_LEDGER_ENTRY, entry)
        return True
