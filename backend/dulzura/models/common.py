from __future__ import annotations

from decimal import Decimal


def as_float(value: Decimal | None) -> float | None:
    """DECIMAL columns serialize as JSON numbers."""
    return float(value) if value is not None else None
