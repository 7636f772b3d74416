"""Tests for the Google Sheets adapter against a scripted HTTP session."""

import asyncio
from datetime import datetime, timezone

import pytest
import requests

from shopsync.domain.exceptions import RemoteAuthError, RemoteError, RemoteUnavailableError
from shopsync.domain.model.operations import SaleRecord, SoldItem
from shopsync.domain.model.value_objects import Money
from shopsync.infrastructure.remote.sheets_adapter import BASE_URL, SheetsRemoteAdapter

SHEET_ID = "sheet-123"
ROWS = [
    ["Rice", "R1", "5,000", "60", "gram", "kilogram", "1000"],
    ["Oil", "O1", "2000", "180", "millilitre", "litre", "1000"],
]


class FakeResponse:

    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = str(self._payload)
        self.content = b"{}" if payload is not None else b""

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


class FakeSession:
    """Answers requests from a ``{(method, path): response}`` table.

    Unrouted GETs return an empty value range; unrouted writes succeed.
    """

    def __init__(self, routes=None, error=None):
        self.headers = {}
        self.routes = routes or {}
        self.error = error
        self.requests = []

    def request(self, method, url, timeout=None, **kwargs):
        path = url[len(f"{BASE_URL}/{SHEET_ID}"):]
        self.requests.append((method, path, kwargs))
        if self.error is not None:
            raise self.error
        return self.routes.get((method, path), FakeResponse(200, {}))


def _adapter(routes=None, error=None, spreadsheet_id=SHEET_ID):
    session = FakeSession(routes, error)
    adapter = SheetsRemoteAdapter(spreadsheet_id, "token-abc", timeout=1, session=session)
    return adapter, session


def _sale():
    return SaleRecord(
        date=datetime(2026, 1, 5, tzinfo=timezone.utc),
        amount=Money.of("120"),
        item_count=1,
        invoice_id="1767571200000",
        items=(SoldItem("Rice", 2),),
    )


class TestInventory:

    def test_fetch_snapshot(self):
        adapter, session = _adapter({("GET", "/values/A2:G"): FakeResponse(200, {"values": ROWS})})

        rows = asyncio.run(adapter.fetch_inventory_snapshot())

        assert rows == ROWS
        assert session.headers["Authorization"] == "Bearer token-abc"

    def test_empty_sheet(self):
        adapter, _ = _adapter()
        assert asyncio.run(adapter.fetch_inventory_snapshot()) == []

    def test_deduction_writes_quantity_cells(self):
        adapter, session = _adapter({("GET", "/values/A2:G"): FakeResponse(200, {"values": ROWS})})

        result = asyncio.run(adapter.apply_deduction([SoldItem("oil", 0.5), SoldItem("Rice", 2)]))

        assert result.success
        assert result.matched_count == 2
        method, path, kwargs = session.requests[-1]
        assert (method, path) == ("POST", "/values:batchUpdate")
        assert kwargs["json"]["data"] == [
            {"range": "C2", "values": [[3000]]},
            {"range": "C3", "values": [[1500]]},
        ]

    def test_deduction_without_match_sends_nothing(self):
        adapter, session = _adapter({("GET", "/values/A2:G"): FakeResponse(200, {"values": ROWS})})

        result = asyncio.run(adapter.apply_deduction([SoldItem("Ghee", 1)]))

        assert result.success
        assert result.unmatched == ("Ghee",)
        assert [r[0] for r in session.requests] == ["GET"]


class TestAppends:

    def test_sale_appended_to_existing_tab(self):
        adapter, session = _adapter({
            ("GET", "/values/Sales!A1:E1"): FakeResponse(200, {"values": [["Date"]]}),
        })

        assert asyncio.run(adapter.apply_sale_record(_sale()))

        method, path, kwargs = session.requests[-1]
        assert (method, path) == ("POST", "/values/Sales!A1:append")
        [row] = kwargs["json"]["values"]
        assert row[1:4] == ["120", 1, "1767571200000"]

    def test_missing_tab_is_created_with_headers(self):
        adapter, session = _adapter({
            ("GET", "/values/Sales!A1:E1"): FakeResponse(400, {"error": {"message": "bad range"}}),
        })

        assert asyncio.run(adapter.apply_sale_record(_sale()))

        calls = [(m, p) for m, p, _ in session.requests]
        assert ("POST", ":batchUpdate") in calls
        assert ("PUT", "/values/Sales!A1:E1") in calls

    def test_rejected_append_returns_false(self):
        adapter, _ = _adapter({
            ("GET", "/values/Sales!A1:E1"): FakeResponse(200, {"values": [["Date"]]}),
            ("POST", "/values/Sales!A1:append"): FakeResponse(500, {}),
        })
        assert not asyncio.run(adapter.apply_sale_record(_sale()))


class TestErrors:

    def test_network_failure(self):
        adapter, _ = _adapter(error=requests.exceptions.ConnectionError("no route"))
        with pytest.raises(RemoteUnavailableError):
            asyncio.run(adapter.fetch_inventory_snapshot())

    def test_network_failure_is_not_swallowed_by_append(self):
        adapter, _ = _adapter(error=requests.exceptions.Timeout("slow"))
        with pytest.raises(RemoteUnavailableError):
            asyncio.run(adapter.apply_sale_record(_sale()))

    def test_expired_token(self):
        adapter, _ = _adapter({("GET", "/values/A2:G"): FakeResponse(401, {})})
        with pytest.raises(RemoteAuthError, match="Session expired"):
            asyncio.run(adapter.fetch_inventory_snapshot())

    def test_no_sheet_connected(self):
        adapter, session = _adapter(spreadsheet_id="")
        with pytest.raises(RemoteError, match="No Google Sheet connected"):
            asyncio.run(adapter.fetch_inventory_snapshot())
        assert session.requests == []
