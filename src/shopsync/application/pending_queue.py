"""Pending operation queue built on the ``pending_operations`` collection.

Holds only unresolved work: an operation is deleted, not archived, once
the remote store has accepted it.  Ids are assigned by the store and grow
with insertion order, which is the replay order.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from shopsync.domain.model.operations import (
    PAYLOAD_TYPES,
    OperationPayload,
    OperationStatus,
    OperationType,
    PendingOperation,
    check_payload,
)
from shopsync.domain.repository.local_store import PENDING_OPERATIONS, LocalStore

logger = logging.getLogger(__name__)


class PendingOperationQueue:

    def __init__(self, store: LocalStore) -> None:
        self._store = store

    async def enqueue(self, operation_type: OperationType, payload: OperationPayload) -> int:
        """Durably queue an operation and return its id."""
        check_payload(operation_type, payload)
        operation = PendingOperation(id=None, type=operation_type, payload=payload)
        raw = self._to_raw(operation)
        del raw["id"]
        op_id = await self._store.add(PENDING_OPERATIONS, raw)
        logger.info("Queued %s as operation #%s", operation_type.value, op_id)
        return op_id

    async def list_pending(self) -> list[PendingOperation]:
        """All queued operations, oldest first."""
        records = await self._store.get_all(PENDING_OPERATIONS)
        operations = [self._to_domain(raw) for raw in records]
        operations.sort(key=lambda op: op.id)
        return operations

    async def resolve(self, op_id: int) -> None:
        """Remove an applied operation.  Resolving twice is harmless."""
        await self._store.delete(PENDING_OPERATIONS, op_id)

    async def count(self) -> int:
        return len(await self._store.get_all(PENDING_OPERATIONS))

    async def clear(self) -> None:
        """Drop every queued operation (manual recovery from permanent failures)."""
        await self._store.clear(PENDING_OPERATIONS)
        logger.warning("Pending operation queue cleared manually")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(operation: PendingOperation) -> dict:
        return {
            "id": operation.id,
            "type": operation.type.value,
            "payload": operation.payload.to_raw(),
            "timestamp": operation.timestamp.isoformat(),
            "status": operation.status.value,
        }

    @staticmethod
    def _to_domain(raw: dict) -> PendingOperation:
        operation_type = OperationType(raw["type"])
        payload = PAYLOAD_TYPES[operation_type].from_raw(raw["payload"])
        timestamp = raw.get("timestamp")
        return PendingOperation(
            id=raw["id"],
            type=operation_type,
            payload=payload,
            timestamp=(
                datetime.fromisoformat(timestamp)
                if timestamp
                else datetime.now(timezone.utc)
            ),
            status=OperationStatus(raw.get("status", OperationStatus.PENDING.value)),
        )
