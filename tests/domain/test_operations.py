"""Unit tests for pending operation payloads."""

from datetime import datetime, timezone

import pytest

from shopsync.domain.exceptions import ValidationError
from shopsync.domain.model.operations import (
    LedgerEntry,
    LedgerEntryType,
    OperationType,
    PendingOperation,
    SaleRecord,
    SoldItem,
    StockDeduction,
    check_payload,
)
from shopsync.domain.model.value_objects import Money


def _sale():
    return SaleRecord(
        date=datetime(2026, 1, 5, 10, 30, tzinfo=timezone.utc),
        amount=Money.of("120.00"),
        item_count=1,
        invoice_id="1767609000000",
        items=(SoldItem("Rice", 2),),
    )


class TestPayloads:

    def test_sold_item_requires_positive_quantity(self):
        with pytest.raises(ValidationError, match="must be positive"):
            SoldItem("Rice", 0)

    def test_empty_deduction_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            StockDeduction(items=())

    def test_sale_record_raw_form(self):
        raw = _sale().to_raw()
        assert raw["amount"] == "120.00"
        assert raw["itemCount"] == 1
        assert raw["items"] == [{"name": "Rice", "quantityDisplay": 2}]
        assert SaleRecord.from_raw(raw) == _sale()

    def test_ledger_entry_needs_positive_amount(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            LedgerEntry("Asha", LedgerEntryType.CREDIT, Money.of("0"), "2026-01-05")

    def test_payload_classes_carry_their_tag(self):
        assert StockDeduction.operation_type is OperationType.DEDUCT_STOCK
        assert SaleRecord.operation_type is OperationType.RECORD_SALE
        assert LedgerEntry.operation_type is OperationType.ADD_LEDGER_ENTRY


class TestPendingOperation:

    def test_mismatched_payload_rejected(self):
        with pytest.raises(ValidationError, match="requires a StockDeduction"):
            PendingOperation(id=None, type=OperationType.DEDUCT_STOCK, payload=_sale())

    def test_check_payload_accepts_match(self):
        check_payload(OperationType.RECORD_SALE, _sale())

    def test_defaults(self):
        op = PendingOperation(
            id=None,
            type=OperationType.DEDUCT_STOCK,
            payload=StockDeduction(items=(SoldItem("Rice", 1),)),
        )
        assert op.status.value == "pending"
        assert op.timestamp.tzinfo is not None
