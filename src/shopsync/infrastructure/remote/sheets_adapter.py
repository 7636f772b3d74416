"""Google Sheets implementation of RemoteAdapter.

Sheet layout:

* first sheet, ``A2:G``: Name, SKU, Qty (base units), Price, Base Unit,
  Display Unit, Conversion Factor
* ``Sales``: Date, Total Amount, Items Count, Invoice ID, Item Details
* ``Customers``: Name, Phone, Notes
* ``Ledger``: Date, Customer, Type, Amount, Description

``requests`` is blocking, so every call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import logging

import requests

from shopsync.domain.exceptions import (
    RemoteAuthError,
    RemoteError,
    RemoteUnavailableError,
)
from shopsync.domain.model.inventory import COL_QTY
from shopsync.domain.model.operations import LedgerEntry, SaleRecord, SoldItem
from shopsync.domain.repository.remote_adapter import DeductionResult, RemoteAdapter
from shopsync.domain.service.stock_deduction_service import plan_deductions

logger = logging.getLogger(__name__)

BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
INVENTORY_RANGE = "A2:G"
INVENTORY_FIRST_ROW = 2
QTY_COLUMN = "ABCDEFG"[COL_QTY]
SALES_HEADERS = ["Date", "Total Amount", "Items Count", "Invoice ID", "Item Details"]
LEDGER_HEADERS = ["Date", "Customer", "Type", "Amount", "Description"]


def _cell_value(quantity: float) -> float | int:
    return int(quantity) if float(quantity).is_integer() else quantity


class SheetsRemoteAdapter(RemoteAdapter):

    def __init__(
        self,
        spreadsheet_id: str,
        access_token: str,
        timeout: float = 15,
        session: requests.Session | None = None,
    ) -> None:
        self._spreadsheet_id = spreadsheet_id
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {access_token}"})

    # --- RemoteAdapter interface ----------------------------------------------

    async def fetch_inventory_snapshot(self) -> list[list]:
        return await asyncio.to_thread(self._get_values, INVENTORY_RANGE)

    async def apply_deduction(self, items: list[SoldItem]) -> DeductionResult:
        return await asyncio.to_thread(self._deduct, items)

    async def apply_sale_record(self, record: SaleRecord) -> bool:
        row = [
            record.date.isoformat(),
            str(record.amount.amount),
            record.item_count,
            record.invoice_id,
            json.dumps([item.to_raw() for item in record.items]),
        ]
        return await asyncio.to_thread(self._append_to_tab, "Sales", SALES_HEADERS, row)

    async def apply_ledger_entry(self, entry: LedgerEntry) -> bool:
        row = [
            entry.date,
            entry.customer_name,
            entry.entry_type.value,
            str(entry.amount.amount),
            entry.description,
        ]
        return await asyncio.to_thread(self._append_to_tab, "Ledger", LEDGER_HEADERS, row)

    async def fetch_customers(self) -> list[list]:
        return await asyncio.to_thread(self._get_values, "Customers!A2:C", True)

    async def fetch_sales_history(self) -> list[list]:
        return await asyncio.to_thread(self._get_values, "Sales!A2:E", True)

    # --- Sheets operations ----------------------------------------------------

    def _deduct(self, items: list[SoldItem]) -> DeductionResult:
        rows = self._get_values(INVENTORY_RANGE)
        plan = plan_deductions(rows, items)
        if not plan.updates:
            return DeductionResult(success=True, matched_count=0, unmatched=tuple(plan.unmatched))

        data = [
            {
                "range": f"{QTY_COLUMN}{update.row_index + INVENTORY_FIRST_ROW}",
                "values": [[_cell_value(update.quantity_base)]],
            }
            for update in plan.updates
        ]
        self._request(
            "POST",
            "/values:batchUpdate",
            json={"valueInputOption": "USER_ENTERED", "data": data},
        )
        return DeductionResult(
            success=True,
            matched_count=plan.matched_count,
            unmatched=tuple(plan.unmatched),
        )

    def _append_to_tab(self, tab: str, headers: list[str], row: list) -> bool:
        try:
            self._ensure_tab(tab, headers)
            self._request(
                "POST",
                f"/values/{tab}!A1:append",
                params={"valueInputOption": "USER_ENTERED"},
                json={"values": [row]},
            )
        except (RemoteAuthError, RemoteUnavailableError):
            raise
        except RemoteError as exc:
            logger.error("Appending to %s failed: %s", tab, exc)
            return False
        return True

    def _ensure_tab(self, tab: str, headers: list[str]) -> None:
        existing = self._get_values(f"{tab}!A1:E1", missing_ok=True)
        if existing:
            return
        try:
            self._request(
                "POST",
                ":batchUpdate",
                json={"requests": [{"addSheet": {"properties": {"title": tab}}}]},
            )
        except RemoteError as exc:
            # Already present but empty; writing the header row is enough.
            logger.debug("addSheet %s: %s", tab, exc)
        self._request(
            "PUT",
            f"/values/{tab}!A1:E1",
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": [headers]},
        )

    def _get_values(self, cell_range: str, missing_ok: bool = False) -> list[list]:
        try:
            data = self._request("GET", f"/values/{cell_range}")
        except (RemoteAuthError, RemoteUnavailableError):
            raise
        except RemoteError:
            # A tab that does not exist yet comes back as HTTP 400.
            if missing_ok:
                return []
            raise
        return data.get("values", [])

    # --- HTTP -----------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs) -> dict:
        if not self._spreadsheet_id:
            raise RemoteError("No Google Sheet connected (set SHOPSYNC_SPREADSHEET_ID)")
        url = f"{BASE_URL}/{self._spreadsheet_id}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise RemoteUnavailableError(f"Cannot reach Google Sheets: {exc}") from exc

        if response.status_code == 401:
            raise RemoteAuthError("Session expired: sign in again")
        if not response.ok:
            raise RemoteError(f"Sheets API error {response.status_code}: {response.text[:200]}")

        data = response.json() if response.content else {}
        if isinstance(data, dict) and data.get("error"):
            raise RemoteError(data["error"].get("message", "Unknown Sheets API error"))
        return data
