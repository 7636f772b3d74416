"""Replays a queued operation against the remote adapter.

An ``OperationReplayer`` instance is the ``apply`` function handed to the
SyncCoordinator.  Dispatch is a table keyed by OperationType; the
constructor refuses to build one that misses a type, so adding a new
operation kind without a handler fails immediately rather than at replay.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from shopsync.domain.model.operations import (
    LedgerEntry,
    OperationType,
    PendingOperation,
    SaleRecord,
    StockDeduction,
)
from shopsync.domain.repository.remote_adapter import RemoteAdapter

logger = logging.getLogger(__name__)


class OperationReplayer:

    def __init__(self, remote: RemoteAdapter) -> None:
        self._remote = remote
        self._handlers: dict[OperationType, Callable[[object], Awaitable[bool]]] = {
            OperationType.DEDUCT_STOCK: self._replay_deduction,
            OperationType.RECORD_SALE: self._replay_sale,
            OperationType.ADD_LEDGER_ENTRY: self._replay_ledger_entry,
        }
        missing = set(OperationType) - set(self._handlers)
        if missing:
            raise TypeError(
                f"No replay handler for {sorted(t.value for t in missing)}"
            )

    async def __call__(self, operation: PendingOperation) -> bool:
        handler = self._handlers[operation.type]
        return await handler(operation.payload)

    # --- Handlers -------------------------------------------------------------

    async def _replay_deduction(self, payload: StockDeduction) -> bool:
        result = await self._remote.apply_deduction(list(payload.items))
        if result.success and result.matched_count < len(payload.items):
            # A missing item will never match later either, so the
            # operation is still treated as applied.
            logger.warning(
                "No remote match for %d of %d sold item(s) %s; deduction skipped for them",
                len(payload.items) - result.matched_count,
                len(payload.items),
                list(result.unmatched),
            )
        return result.success

    async def _replay_sale(self, payload: SaleRecord) -> bool:
        return await self._remote.apply_sale_record(payload)

    async def _replay_ledger_entry(self, payload: LedgerEntry) -> bool:
        return await self._remote.apply_ledger_entry(payload)
