"""Abstract remote adapter for the spreadsheet-backed inventory service.

The adapter owns every HTTP detail.  The core only relies on these
contracts; deduction arithmetic itself comes from the domain service so
online and replayed calls agree.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shopsync.domain.model.operations import LedgerEntry, SaleRecord, SoldItem


@dataclass(frozen=True)
class DeductionResult:
    success: bool
    matched_count: int
    unmatched: tuple[str, ...] = ()


class RemoteAdapter(ABC):

    @abstractmethod
    async def fetch_inventory_snapshot(self) -> list[list]:
        """Return raw inventory rows (Name, SKU, Qty, Price, Base, Display, Factor)."""

    @abstractmethod
    async def apply_deduction(self, items: list[SoldItem]) -> DeductionResult:
        """Deduct sold display quantities from the matching remote rows."""

    @abstractmethod
    async def apply_sale_record(self, record: SaleRecord) -> bool:
        """Append a sale to the sales ledger.  Returns False on rejection."""

    @abstractmethod
    async def apply_ledger_entry(self, entry: LedgerEntry) -> bool:
        """Append a customer credit/payment entry.  Returns False on rejection."""

    @abstractmethod
    async def fetch_customers(self) -> list[list]:
        """Return raw customer rows (Name, Phone, Notes)."""

    @abstractmethod
    async def fetch_sales_history(self) -> list[list]:
        """Return raw sales rows (Date, Amount, Items Count, Invoice ID, Details)."""
