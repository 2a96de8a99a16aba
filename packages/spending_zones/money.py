"""Decimal helpers for currency math and display.

All amounts flowing through the package are :class:`~decimal.Decimal`. These
helpers keep rounding explicit (half-up, like a receipt) so percentages and
projections never pick up binary floating-point drift.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext

ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")


def as_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a well-typed amount to ``Decimal``; ``None`` becomes zero."""

    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() anchors to the shortest repr, so 19.99 stays 19.99
        return Decimal(str(value))
    return Decimal(value)


def round_whole(d: Decimal) -> Decimal:
    """Round to a whole number, half-up. Non-finite values pass through."""

    if not d.is_finite():
        return d
    with localcontext() as ctx:
        # quantize needs every integer digit to fit in the context precision
        ctx.prec = max(ctx.prec, d.adjusted() + 2)
        return d.quantize(_ONE, rounding=ROUND_HALF_UP)


def fmt_dollars(d: Decimal) -> str:
    """Whole-dollar display string, e.g. ``Decimal("12.5")`` -> ``"$13"``."""

    return f"${round_whole(d):f}"


def percent(part: Decimal, whole: Decimal) -> int:
    """``part / whole`` as a whole percentage, rounded half-up.

    Callers must check ``whole`` for zero first.
    """

    return int(round_whole(part / whole * _HUNDRED))


def share(part: Decimal, whole: Decimal) -> Decimal | None:
    """``part / whole`` or ``None`` when ``whole`` is zero."""

    if whole == 0:
        return None
    return part / whole


__all__ = ["ZERO", "as_decimal", "round_whole", "fmt_dollars", "percent", "share"]
