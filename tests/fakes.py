"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON store and the
Sheets adapter but keep everything in dicts and lists.  No file I/O, no
network.
"""

from __future__ import annotations

import copy
from typing import Any

from shopsync.domain.exceptions import (
    DuplicateKeyError,
    RemoteUnavailableError,
    StoreUnavailableError,
    ValidationError,
)
from shopsync.domain.model.inventory import COL_QTY
from shopsync.domain.model.operations import LedgerEntry, SaleRecord, SoldItem
from shopsync.domain.repository.local_store import KEY_PATHS, LocalStore, Record
from shopsync.domain.repository.remote_adapter import DeductionResult, RemoteAdapter
from shopsync.domain.service.stock_deduction_service import plan_deductions


class InMemoryLocalStore(LocalStore):

    def __init__(self) -> None:
        self._collections: dict[str, dict[Any, Record]] = {name: {} for name in KEY_PATHS}
        self._next_ids: dict[str, int] = {name: 1 for name in KEY_PATHS}
        self._is_open = False

    async def open(self) -> None:
        self._is_open = True

    async def close(self) -> None:
        self._is_open = False

    async def get_all(self, collection: str) -> list[Record]:
        key_path = self._check(collection)
        records = self._collections[collection].values()
        return [copy.deepcopy(r) for r in sorted(records, key=lambda r: r[key_path])]

    async def get(self, collection: str, key: Any) -> Record | None:
        self._check(collection)
        record = self._collections[collection].get(key)
        return copy.deepcopy(record) if record is not None else None

    async def add(self, collection: str, record: Record) -> Any:
        key_path = self._check(collection)
        record = copy.deepcopy(record)
        key = record.get(key_path)
        if key is None:
            key = self._next_ids[collection]
            record[key_path] = key
        elif key in self._collections[collection]:
            raise DuplicateKeyError(f"Key {key!r} already exists in '{collection}'")
        if isinstance(key, int):
            self._next_ids[collection] = max(self._next_ids[collection], key + 1)
        self._collections[collection][key] = record
        return key

    async def put(self, collection: str, record: Record) -> Any:
        key_path = self._check(collection)
        if record.get(key_path) is None:
            return await self.add(collection, record)
        key = record[key_path]
        if isinstance(key, int):
            self._next_ids[collection] = max(self._next_ids[collection], key + 1)
        self._collections[collection][key] = copy.deepcopy(record)
        return key

    async def delete(self, collection: str, key: Any) -> None:
        self._check(collection)
        self._collections[collection].pop(key, None)

    async def clear(self, collection: str) -> None:
        self._check(collection)
        self._collections[collection].clear()

    async def replace_all(self, collection: str, records: list[Record]) -> list[Any]:
        key_path = self._check(collection)
        replacement: dict[Any, Record] = {}
        next_id = self._next_ids[collection]
        keys = []
        for record in records:
            record = copy.deepcopy(record)
            key = record.get(key_path)
            if key is None:
                key = next_id
                record[key_path] = key
            elif key in replacement:
                raise DuplicateKeyError(f"Key {key!r} already exists in '{collection}'")
            if isinstance(key, int):
                next_id = max(next_id, key + 1)
            replacement[key] = record
            keys.append(key)
        self._collections[collection] = replacement
        self._next_ids[collection] = next_id
        return keys

    def _check(self, collection: str) -> str:
        if not self._is_open:
            raise StoreUnavailableError("Local store is not open")
        if collection not in KEY_PATHS:
            raise ValidationError(f"Unknown collection '{collection}'")
        return KEY_PATHS[collection]


class FakeRemoteAdapter(RemoteAdapter):
    """A remote sheet held in memory.

    ``rows`` uses the real sheet layout (Name, SKU, Qty, Price, Base,
    Display, Factor) and deductions go through the same planning code as
    the Sheets adapter.  Set ``unreachable`` to simulate a dead network,
    or ``reject_invoices`` to make specific sale records fail.
    """

    def __init__(self, rows: list[list] | None = None) -> None:
        self.rows: list[list] = [list(r) for r in rows or []]
        self.sales: list[SaleRecord] = []
        self.ledger: list[LedgerEntry] = []
        self.customers: list[list] = []
        self.calls: list[str] = []
        self.unreachable = False
        self.reject_invoices: set[str] = set()

    async def fetch_inventory_snapshot(self) -> list[list]:
        self._check_reachable()
        return [list(r) for r in self.rows]

    async def apply_deduction(self, items: list[SoldItem]) -> DeductionResult:
        self.calls.append("deduct:" + ",".join(f"{i.name}={i.quantity_display:g}" for i in items))
        self._check_reachable()
        plan = plan_deductions(self.rows, items)
        for update in plan.updates:
            self.rows[update.row_index][COL_QTY] = update.quantity_base
        return DeductionResult(
            success=True,
            matched_count=plan.matched_count,
            unmatched=tuple(plan.unmatched),
        )

    async def apply_sale_record(self, record: SaleRecord) -> bool:
        self.calls.append(f"sale:{record.invoice_id}")
        self._check_reachable()
        if record.invoice_id in self.reject_invoices:
            return False
        self.sales.append(record)
        return True

    async def apply_ledger_entry(self, entry: LedgerEntry) -> bool:
        self.calls.append(f"ledger:{entry.customer_name}")
        self._check_reachable()
        self.ledger.append(entry)
        return True

    async def fetch_customers(self) -> list[list]:
        self._check_reachable()
        return [list(r) for r in self.customers]

    async def fetch_sales_history(self) -> list[list]:
        self._check_reachable()
        return [
            [s.date.isoformat(), str(s.amount.amount), s.item_count, s.invoice_id, "[]"]
            for s in self.sales
        ]

    def quantity_of(self, name: str) -> float:
        for row in self.rows:
            if row[0] == name:
                return float(row[COL_QTY])
        raise KeyError(name)

    def _check_reachable(self) -> None:
        if self.unreachable:
            raise RemoteUnavailableError("network down")
