"""InventoryItem: the locally cached snapshot of one remote inventory row.

The remote spreadsheet is the source of truth.  Items are rebuilt from
its rows on every successful fetch and only mutated locally by optimistic
deductions that the next fetch reconciles.
"""

from __future__ import annotations

from dataclasses import dataclass

from shopsync.domain.exceptions import ValidationError
from shopsync.domain.model import units
from shopsync.domain.model.value_objects import Money

DEFAULT_BASE_UNIT = "gram"
DEFAULT_DISPLAY_UNIT = "kilogram"
DEFAULT_CONVERSION_FACTOR = 1000.0

# Column positions in the remote inventory sheet (range A2:G).
COL_NAME, COL_SKU, COL_QTY, COL_PRICE, COL_BASE_UNIT, COL_DISPLAY_UNIT, COL_FACTOR = range(7)


def _cell(row: list, index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return ""


def row_conversion_factor(row: list) -> float:
    """Conversion factor of a raw row; zero or unparseable falls back to 1000."""
    factor = units.parse_number(_cell(row, COL_FACTOR), DEFAULT_CONVERSION_FACTOR)
    if factor <= 0:
        return DEFAULT_CONVERSION_FACTOR
    return factor


@dataclass
class InventoryItem:
    """Cached inventory row.

    Invariants:
    - ``conversion_factor`` > 0
    - ``quantity_base`` >= 0
    """

    id: int
    name: str
    quantity_base: float
    price: Money
    base_unit: str = DEFAULT_BASE_UNIT
    display_unit: str = DEFAULT_DISPLAY_UNIT
    conversion_factor: float = DEFAULT_CONVERSION_FACTOR
    sku: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Item name is required")
        if self.conversion_factor <= 0:
            raise ValidationError(
                f"Conversion factor for {self.name} must be positive, "
                f"got {self.conversion_factor}"
            )
        if self.quantity_base < 0:
            raise ValidationError(f"Stock for {self.name} cannot be negative")

    @property
    def quantity_display(self) -> float:
        return units.to_display_quantity(self.quantity_base, self.conversion_factor)

    @property
    def low(self) -> bool:
        return units.is_low_stock(self.quantity_base, self.conversion_factor)

    def deduct(self, sold_display_quantity: float) -> None:
        """Optimistically remove sold stock from the cached snapshot."""
        self.quantity_base = units.deduct(
            self.quantity_base, sold_display_quantity, self.conversion_factor
        )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def from_row(item_id: int, row: list) -> InventoryItem:
        """Build an item from a raw sheet row.

        Missing cells fall back to ``0`` stock, ``0`` price, gram/kilogram
        and a factor of 1000.  A zero or unparseable factor also falls
        back to 1000.
        """
        return InventoryItem(
            id=item_id,
            name=_cell(row, COL_NAME).strip(),
            sku=_cell(row, COL_SKU).strip() or None,
            quantity_base=max(0.0, units.parse_number(_cell(row, COL_QTY))),
            price=Money.of(max(0.0, units.parse_number(_cell(row, COL_PRICE)))),
            base_unit=_cell(row, COL_BASE_UNIT).strip() or DEFAULT_BASE_UNIT,
            display_unit=_cell(row, COL_DISPLAY_UNIT).strip() or DEFAULT_DISPLAY_UNIT,
            conversion_factor=row_conversion_factor(row),
        )
