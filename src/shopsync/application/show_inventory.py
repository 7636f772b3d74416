"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from shopsync.application.dto import InventoryLineDTO
from shopsync.application.local_cache import LocalCache


class ShowInventoryHandler:

    def __init__(self, cache: LocalCache) -> None:
        self._cache = cache

    async def handle(self) -> list[InventoryLineDTO]:
        items = await self._cache.cached_inventory()
        return [
            InventoryLineDTO(
                name=item.name,
                sku=item.sku or "",
                stock=f"{round(item.quantity_display, 2):g} {item.display_unit}",
                price=str(item.price),
                low=item.low,
            )
            for item in items
        ]
