"""Integration tests for the pending operation queue.

Uses the in-memory fake store, no file I/O.
"""

import asyncio

import pytest

from shopsync.application.pending_queue import PendingOperationQueue
from shopsync.domain.exceptions import ValidationError
from shopsync.domain.model.operations import (
    OperationType,
    SoldItem,
    StockDeduction,
)
from tests.fakes import InMemoryLocalStore


def _deduction(name="Rice", qty=1.0):
    return StockDeduction(items=(SoldItem(name, qty),))


def _setup() -> tuple[PendingOperationQueue, InMemoryLocalStore]:
    store = InMemoryLocalStore()
    asyncio.run(store.open())
    return PendingOperationQueue(store), store


class TestEnqueue:

    def test_ids_grow_with_insertion_order(self):
        queue, _ = _setup()

        async def run():
            first = await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction())
            second = await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction("Oil"))
            return first, second

        first, second = asyncio.run(run())
        assert second > first

    def test_payload_survives_storage(self):
        queue, _ = _setup()

        async def run():
            await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction("Rice", 1.5))
            return await queue.list_pending()

        [op] = asyncio.run(run())
        assert op.type is OperationType.DEDUCT_STOCK
        assert op.payload == _deduction("Rice", 1.5)
        assert op.status.value == "pending"

    def test_mismatched_payload_rejected_before_storage(self):
        queue, _ = _setup()
        with pytest.raises(ValidationError):
            asyncio.run(queue.enqueue(OperationType.RECORD_SALE, _deduction()))
        assert asyncio.run(queue.count()) == 0


class TestListPending:

    def test_empty_queue(self):
        queue, _ = _setup()
        assert asyncio.run(queue.list_pending()) == []

    def test_oldest_first(self):
        queue, _ = _setup()

        async def run():
            for name in ("Rice", "Oil", "Sugar"):
                await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction(name))
            return await queue.list_pending()

        ops = asyncio.run(run())
        assert [op.payload.items[0].name for op in ops] == ["Rice", "Oil", "Sugar"]


class TestResolve:

    def test_resolve_removes_operation(self):
        queue, _ = _setup()

        async def run():
            op_id = await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction())
            await queue.resolve(op_id)
            return await queue.count()

        assert asyncio.run(run()) == 0

    def test_resolve_twice_is_harmless(self):
        queue, _ = _setup()

        async def run():
            op_id = await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction())
            await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction("Oil"))
            await queue.resolve(op_id)
            await queue.resolve(op_id)
            return await queue.count()

        assert asyncio.run(run()) == 1

    def test_resolve_unknown_id(self):
        queue, _ = _setup()
        asyncio.run(queue.resolve(999))
        assert asyncio.run(queue.count()) == 0

    def test_ids_not_reused_after_resolve(self):
        queue, _ = _setup()

        async def run():
            first = await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction())
            await queue.resolve(first)
            return first, await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction())

        first, second = asyncio.run(run())
        assert second > first


class TestClear:

    def test_clear_drops_everything(self):
        queue, _ = _setup()

        async def run():
            await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction())
            await queue.enqueue(OperationType.DEDUCT_STOCK, _deduction())
            await queue.clear()
            return await queue.count()

        assert asyncio.run(run()) == 0
