"""Application service: Show Pending Operations use case (query)."""

from __future__ import annotations

from shopsync.application.dto import PendingOperationDTO
from shopsync.application.pending_queue import PendingOperationQueue
from shopsync.domain.model.operations import (
    LedgerEntry,
    PendingOperation,
    SaleRecord,
    StockDeduction,
)


def _summarize(operation: PendingOperation) -> str:
    payload = operation.payload
    if isinstance(payload, StockDeduction):
        return ", ".join(f"{i.name} x{i.quantity_display:g}" for i in payload.items)
    if isinstance(payload, SaleRecord):
        return f"invoice {payload.invoice_id}, {payload.amount}, {payload.item_count} item(s)"
    if isinstance(payload, LedgerEntry):
        return f"{payload.entry_type.value} {payload.amount} for {payload.customer_name}"
    raise TypeError(f"Unhandled payload {type(payload).__name__}")


class ShowPendingHandler:

    def __init__(self, queue: PendingOperationQueue) -> None:
        self._queue = queue

    async def handle(self) -> list[PendingOperationDTO]:
        return [
            PendingOperationDTO(
                id=op.id,
                type=op.type.value,
                timestamp=op.timestamp.isoformat(timespec="seconds"),
                summary=_summarize(op),
            )
            for op in await self._queue.list_pending()
        ]
