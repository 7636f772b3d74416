"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SaleLineSpec:
    """Input: what the customer is buying (item name + display quantity)."""

    item_name: str
    quantity: float


@dataclass(frozen=True)
class SaleReceipt:
    """Output: a completed (or queued) sale."""

    invoice_id: str
    amount: str  # formatted, e.g. "₹120.00"
    item_count: int
    queued: bool


@dataclass(frozen=True)
class SyncReport:
    """Output of one drain pass.

    ``started`` is False when the pass was skipped (already draining or
    offline).  ``interrupted`` is True when connectivity dropped mid-pass
    and the remaining operations were left queued.
    """

    success_count: int = 0
    failure_count: int = 0
    started: bool = True
    interrupted: bool = False


@dataclass(frozen=True)
class InventoryLineDTO:
    name: str
    sku: str
    stock: str  # formatted in display units, e.g. "5 kilogram"
    price: str
    low: bool


@dataclass(frozen=True)
class PendingOperationDTO:
    id: int
    type: str
    timestamp: str
    summary: str
