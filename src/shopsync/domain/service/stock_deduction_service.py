"""Domain service: plan stock deductions against the remote row set.

Sold items are matched to remote rows by normalized name, never by the
locally cached id: the remote sheet decides row positions at replay time.

Items are applied one after another against a running per-row quantity,
so two lines for the same product in one batch compound instead of both
starting from the original stock level.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from shopsync.domain.model import units
from shopsync.domain.model.inventory import COL_NAME, COL_QTY, row_conversion_factor
from shopsync.domain.model.operations import SoldItem


@dataclass(frozen=True)
class RowUpdate:
    """New base quantity for a row (0-based index into the fetched rows)."""

    row_index: int
    quantity_base: float


@dataclass
class DeductionPlan:
    updates: list[RowUpdate] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)
    matched_count: int = 0


def _find_row(rows: list[list], name: str) -> int | None:
    for index, row in enumerate(rows):
        if row and units.names_match(str(row[COL_NAME]), name):
            return index
    return None


def plan_deductions(rows: list[list], items: list[SoldItem] | tuple[SoldItem, ...]) -> DeductionPlan:
    """Compute the row updates that deduct *items* from *rows*.

    The rows are not modified.  Unmatched item names are collected rather
    than raised; the caller decides how to report them.
    """
    plan = DeductionPlan()
    running: dict[int, float] = {}

    for item in items:
        index = _find_row(rows, item.name)
        if index is None:
            plan.unmatched.append(item.name)
            continue

        row = rows[index]
        current = running.get(index)
        if current is None:
            cell = row[COL_QTY] if len(row) > COL_QTY else None
            current = max(0.0, units.parse_number(cell))
        running[index] = units.deduct(
            current, item.quantity_display, row_conversion_factor(row)
        )
        plan.matched_count += 1

    plan.updates = [
        RowUpdate(row_index=index, quantity_base=qty)
        for index, qty in sorted(running.items())
    ]
    return plan
