"""Unit-conversion arithmetic shared by the online and deferred paths.

Stock is stored in a *base* unit (gram, millilitre, piece) and sold in a
*display* unit (kilogram, litre, packet).  ``1 display = factor base``.

Everything here is pure.  A sale made online and the same sale replayed
from the queue an hour later go through exactly these functions, so the
remote quantity they produce is identical.
"""

from __future__ import annotations

LOW_STOCK_THRESHOLD = 10


def _effective_factor(conversion_factor: float) -> float:
    # A zero factor would make every division blow up; treat it as 1:1.
    return conversion_factor if conversion_factor else 1


def to_base_quantity(display_quantity: float, conversion_factor: float) -> float:
    return display_quantity * conversion_factor


def to_display_quantity(base_quantity: float, conversion_factor: float) -> float:
    """Convert base units to display units.

    ``conversion_factor == 0`` is treated as ``1`` and never raises.
    """
    return base_quantity / _effective_factor(conversion_factor)


def deduct(
    current_base_quantity: float,
    sold_display_quantity: float,
    conversion_factor: float,
) -> float:
    """Return the new base quantity after selling *sold_display_quantity*.

    Clamps at zero: recorded stock may already be stale, and a deduction
    never produces negative stock.
    """
    remaining = current_base_quantity - to_base_quantity(
        sold_display_quantity, conversion_factor
    )
    return max(0, remaining)


def is_low_stock(base_quantity: float, conversion_factor: float) -> bool:
    return to_display_quantity(base_quantity, conversion_factor) < LOW_STOCK_THRESHOLD


def normalize_name(name: str | None) -> str:
    return (name or "").strip().lower()


def names_match(left: str | None, right: str | None) -> bool:
    """Case-insensitive, whitespace-trimmed name equality."""
    return normalize_name(left) == normalize_name(right)


def parse_number(raw: object, default: float = 0.0) -> float:
    """Parse a spreadsheet cell such as ``"5,000"`` or ``"12.5"``.

    Empty or unparseable cells yield *default*.
    """
    if raw is None:
        return default
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).replace(",", "").strip()
    if not text:
        return default
    try:
        return float(text)
    except ValueError:
        return default
