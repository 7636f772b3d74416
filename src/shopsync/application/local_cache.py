"""Local snapshots of remote data for offline use.

Inventory, customers and sales are cached wholesale: every successful
fetch swaps the collection for the fresh rows in a single store write,
so a crash mid-refresh leaves the previous snapshot intact.  The inventory
refresh also records ``inventory_last_sync_timestamp`` in app_state.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from shopsync.domain.exceptions import ValidationError
from shopsync.domain.model import units
from shopsync.domain.model.inventory import InventoryItem
from shopsync.domain.model.operations import SoldItem
from shopsync.domain.model.value_objects import Money
from shopsync.domain.repository.local_store import (
    APP_STATE,
    CUSTOMERS,
    INVENTORY,
    INVENTORY_LAST_SYNC,
    SALES,
    LocalStore,
)
from shopsync.domain.repository.remote_adapter import RemoteAdapter

logger = logging.getLogger(__name__)


class LocalCache:

    def __init__(self, store: LocalStore) -> None:
        self._store = store

    # --- Inventory ------------------------------------------------------------

    async def refresh_inventory(self, remote: RemoteAdapter) -> list[InventoryItem]:
        """Replace the cached inventory with a fresh remote snapshot."""
        rows = await remote.fetch_inventory_snapshot()
        items: list[InventoryItem] = []
        for index, row in enumerate(rows):
            try:
                items.append(InventoryItem.from_row(index, row))
            except ValidationError as exc:
                logger.warning("Skipping inventory row %d: %s", index + 2, exc)

        await self._store.replace_all(INVENTORY, [self._item_to_raw(item) for item in items])
        await self.save_app_state(
            INVENTORY_LAST_SYNC, datetime.now(timezone.utc).isoformat()
        )
        logger.info("Inventory cached: %d items", len(items))
        return items

    async def cached_inventory(self) -> list[InventoryItem]:
        return [self._item_to_domain(raw) for raw in await self._store.get_all(INVENTORY)]

    async def find_item(self, name: str) -> InventoryItem | None:
        for item in await self.cached_inventory():
            if units.names_match(item.name, name):
                return item
        return None

    async def apply_local_deduction(self, items: list[SoldItem]) -> None:
        """Optimistically deduct sold stock from the cached snapshot.

        Items missing from the cache are ignored; the next refresh
        reconciles everything anyway.
        """
        cached = await self.cached_inventory()
        for sold in items:
            for item in cached:
                if units.names_match(item.name, sold.name):
                    item.deduct(sold.quantity_display)
                    await self._store.put(INVENTORY, self._item_to_raw(item))
                    break

    async def last_inventory_sync(self) -> datetime | None:
        value = await self.get_app_state(INVENTORY_LAST_SYNC)
        return datetime.fromisoformat(value) if value else None

    # --- Customers & sales ----------------------------------------------------

    async def refresh_customers(self, remote: RemoteAdapter) -> list[dict]:
        rows = await remote.fetch_customers()
        customers = [
            {"name": row[0], "phone": _at(row, 1), "notes": _at(row, 2)}
            for row in rows
            if row and str(row[0]).strip()
        ]
        await self._store.replace_all(CUSTOMERS, customers)
        return await self.cached_customers()

    async def cached_customers(self) -> list[dict]:
        return await self._store.get_all(CUSTOMERS)

    async def refresh_sales(self, remote: RemoteAdapter) -> list[dict]:
        rows = await remote.fetch_sales_history()
        sales = [
            {
                "date": _at(row, 0),
                "amount": _at(row, 1),
                "itemCount": int(units.parse_number(_at(row, 2))),
                "invoiceId": _at(row, 3),
                "items": _at(row, 4),
            }
            for row in rows
            if row
        ]
        await self._store.replace_all(SALES, sales)
        return await self.cached_sales()

    async def cached_sales(self) -> list[dict]:
        return await self._store.get_all(SALES)

    # --- App state ------------------------------------------------------------

    async def save_app_state(self, key: str, value: Any) -> None:
        await self._store.put(APP_STATE, {"key": key, "value": value})

    async def get_app_state(self, key: str) -> Any:
        record = await self._store.get(APP_STATE, key)
        return record["value"] if record else None

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _item_to_raw(item: InventoryItem) -> dict:
        return {
            "id": item.id,
            "name": item.name,
            "sku": item.sku,
            "quantityBase": item.quantity_base,
            "price": str(item.price.amount),
            "currency": item.price.currency,
            "baseUnit": item.base_unit,
            "displayUnit": item.display_unit,
            "conversionFactor": item.conversion_factor,
            "low": item.low,
        }

    @staticmethod
    def _item_to_domain(raw: dict) -> InventoryItem:
        return InventoryItem(
            id=raw["id"],
            name=raw["name"],
            sku=raw.get("sku"),
            quantity_base=raw["quantityBase"],
            price=Money(Decimal(raw["price"]), raw.get("currency", "INR")),
            base_unit=raw["baseUnit"],
            display_unit=raw["displayUnit"],
            conversion_factor=raw["conversionFactor"],
        )


def _at(row: list, index: int) -> str:
    return str(row[index]) if index < len(row) and row[index] is not None else ""
