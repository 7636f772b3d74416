"""Application service: Record Sale use case.

Validates the cart against the cached inventory, prices it, and then
either applies it to the remote store right away (online) or queues a
stock deduction followed by a sale record (offline).  Both paths
deduct the same display quantities, and the remote side converts them
with the same unit arithmetic, so the end state is identical.

If the remote turns out to be unreachable mid-sale, the monitor is
flipped offline and whatever the remote has not yet accepted is queued.
A deduction that already went through is never queued again.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from shopsync.application.connectivity import ConnectivityMonitor
from shopsync.application.dto import SaleLineSpec, SaleReceipt
from shopsync.application.local_cache import LocalCache
from shopsync.application.pending_queue import PendingOperationQueue
from shopsync.domain.exceptions import (
    ApplyFailedError,
    EntityNotFoundError,
    RemoteUnavailableError,
    ValidationError,
)
from shopsync.domain.model import units
from shopsync.domain.model.operations import (
    OperationType,
    SaleRecord,
    SoldItem,
    StockDeduction,
)
from shopsync.domain.model.value_objects import Money, Quantity
from shopsync.domain.repository.remote_adapter import RemoteAdapter

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecordSaleHandler:

    def __init__(
        self,
        cache: LocalCache,
        queue: PendingOperationQueue,
        monitor: ConnectivityMonitor,
        remote: RemoteAdapter,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._cache = cache
        self._queue = queue
        self._monitor = monitor
        self._remote = remote
        self._clock = clock

    async def handle(self, lines: list[SaleLineSpec]) -> SaleReceipt:
        """Sell the given cart."""
        if not lines:
            raise ValidationError("Sale must contain at least one item")

        sold: list[SoldItem] = []
        total = Money.zero()
        # Base units already requested per cached item, so repeated lines
        # for one product are checked against its stock together.
        requested: dict[int, float] = {}
        for line in lines:
            qty = Quantity(line.quantity).value
            item = await self._cache.find_item(line.item_name)
            if item is None:
                raise EntityNotFoundError(f"Item not found: '{line.item_name}'")
            needed = requested.get(item.id, 0.0) + units.to_base_quantity(
                qty, item.conversion_factor
            )
            if needed > item.quantity_base:
                raise ValidationError(
                    f"Insufficient stock for {item.name} "
                    f"(need {units.to_display_quantity(needed, item.conversion_factor):g} "
                    f"{item.display_unit}, "
                    f"have {item.quantity_display:g} {item.display_unit})"
                )
            requested[item.id] = needed
            sold.append(SoldItem(name=item.name, quantity_display=qty))
            total = total + item.price * qty

        now = self._clock()
        record = SaleRecord(
            date=now,
            amount=total,
            item_count=len(sold),
            invoice_id=str(int(now.timestamp() * 1000)),
            items=tuple(sold),
        )

        if self._monitor.is_online():
            queued = await self._apply_online(sold, record)
        else:
            await self._queue_sale(sold, record)
            queued = True

        await self._cache.apply_local_deduction(sold)

        return SaleReceipt(
            invoice_id=record.invoice_id,
            amount=str(total),
            item_count=record.item_count,
            queued=queued,
        )

    async def _apply_online(self, sold: list[SoldItem], record: SaleRecord) -> bool:
        """Apply the sale directly.  Returns True if any part had to be queued."""
        try:
            result = await self._remote.apply_deduction(sold)
        except RemoteUnavailableError as exc:
            logger.warning("Remote unreachable during sale, queuing instead: %s", exc)
            self._monitor.set_online(False)
            await self._queue_sale(sold, record)
            return True
        if not result.success:
            raise ApplyFailedError("Remote store rejected the stock update")

        # Stock is deducted from here on; only the history row may still be queued.
        try:
            recorded = await self._remote.apply_sale_record(record)
        except RemoteUnavailableError as exc:
            logger.warning(
                "Stock updated but sale %s not recorded, queuing the record: %s",
                record.invoice_id,
                exc,
            )
            self._monitor.set_online(False)
            await self._queue.enqueue(OperationType.RECORD_SALE, record)
            return True
        if not recorded:
            logger.warning("Sale %s not recorded in sales history", record.invoice_id)
        return False

    async def _queue_sale(self, sold: list[SoldItem], record: SaleRecord) -> None:
        # Deduction first: replay order is enqueue order.
        await self._queue.enqueue(OperationType.DEDUCT_STOCK, StockDeduction(items=tuple(sold)))
        await self._queue.enqueue(OperationType.RECORD_SALE, record)
