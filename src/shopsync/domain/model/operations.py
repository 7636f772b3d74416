"""Pending operations: mutation intents recorded while offline.

Each operation kind has its own frozen payload class.  ``OperationType``
is the closed set of tags and ``PAYLOAD_TYPES`` maps every tag to the one
payload class allowed for it, so a DEDUCT_STOCK operation can never carry
a ledger entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Union

from shopsync.domain.exceptions import ValidationError
from shopsync.domain.model.value_objects import Money, Quantity


class OperationType(Enum):
    DEDUCT_STOCK = "DEDUCT_STOCK"
    RECORD_SALE = "RECORD_SALE"
    ADD_LEDGER_ENTRY = "ADD_LEDGER_ENTRY"


class OperationStatus(Enum):
    PENDING = "pending"


class LedgerEntryType(Enum):
    CREDIT = "CREDIT"    # udhar: customer took goods on credit
    PAYMENT = "PAYMENT"  # customer paid back


@dataclass(frozen=True)
class SoldItem:
    """One cart line, matched against remote rows by name at replay time."""

    name: str
    quantity_display: float

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Sold item name is required")
        Quantity(self.quantity_display)

    def to_raw(self) -> dict:
        return {"name": self.name, "quantityDisplay": self.quantity_display}

    @staticmethod
    def from_raw(raw: dict) -> SoldItem:
        return SoldItem(name=raw["name"], quantity_display=raw["quantityDisplay"])


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StockDeduction:
    operation_type: ClassVar[OperationType] = OperationType.DEDUCT_STOCK

    items: tuple[SoldItem, ...]

    def __post_init__(self) -> None:
        if not self.items:
            raise ValidationError("Stock deduction must contain at least one item")

    def to_raw(self) -> dict:
        return {"items": [item.to_raw() for item in self.items]}

    @staticmethod
    def from_raw(raw: dict) -> StockDeduction:
        return StockDeduction(items=tuple(SoldItem.from_raw(i) for i in raw["items"]))


@dataclass(frozen=True)
class SaleRecord:
    operation_type: ClassVar[OperationType] = OperationType.RECORD_SALE

    date: datetime
    amount: Money
    item_count: int
    invoice_id: str
    items: tuple[SoldItem, ...] = ()

    def to_raw(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "amount": str(self.amount.amount),
            "currency": self.amount.currency,
            "itemCount": self.item_count,
            "invoiceId": self.invoice_id,
            "items": [item.to_raw() for item in self.items],
        }

    @staticmethod
    def from_raw(raw: dict) -> SaleRecord:
        return SaleRecord(
            date=datetime.fromisoformat(raw["date"]),
            amount=Money(Decimal(raw["amount"]), raw.get("currency", "INR")),
            item_count=raw["itemCount"],
            invoice_id=raw["invoiceId"],
            items=tuple(SoldItem.from_raw(i) for i in raw.get("items", [])),
        )


@dataclass(frozen=True)
class LedgerEntry:
    operation_type: ClassVar[OperationType] = OperationType.ADD_LEDGER_ENTRY

    customer_name: str
    entry_type: LedgerEntryType
    amount: Money
    date: str
    description: str = ""

    def __post_init__(self) -> None:
        if not self.customer_name or not self.customer_name.strip():
            raise ValidationError("Customer name is required")
        if self.amount.amount <= 0:
            raise ValidationError("Ledger amount must be greater than zero")

    def to_raw(self) -> dict:
        return {
            "customerName": self.customer_name,
            "type": self.entry_type.value,
            "amount": str(self.amount.amount),
            "currency": self.amount.currency,
            "description": self.description,
            "date": self.date,
        }

    @staticmethod
    def from_raw(raw: dict) -> LedgerEntry:
        return LedgerEntry(
            customer_name=raw["customerName"],
            entry_type=LedgerEntryType(raw["type"]),
            amount=Money(Decimal(raw["amount"]), raw.get("currency", "INR")),
            description=raw.get("description", ""),
            date=raw["date"],
        )


OperationPayload = Union[StockDeduction, SaleRecord, LedgerEntry]

PAYLOAD_TYPES: dict[OperationType, type] = {
    OperationType.DEDUCT_STOCK: StockDeduction,
    OperationType.RECORD_SALE: SaleRecord,
    OperationType.ADD_LEDGER_ENTRY: LedgerEntry,
}


def check_payload(operation_type: OperationType, payload: object) -> None:
    """Raise ValidationError unless *payload* is the class for *operation_type*."""
    expected = PAYLOAD_TYPES[operation_type]
    if not isinstance(payload, expected):
        raise ValidationError(
            f"{operation_type.value} requires a {expected.__name__} payload, "
            f"got {type(payload).__name__}"
        )


@dataclass
class PendingOperation:
    """A durably queued mutation intent.

    ``id`` is ``None`` until the store assigns one.  ``timestamp`` is set
    once at creation.
    """

    id: int | None
    type: OperationType
    payload: OperationPayload
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: OperationStatus = OperationStatus.PENDING

    def __post_init__(self) -> None:
        check_payload(self.type, self.payload)
