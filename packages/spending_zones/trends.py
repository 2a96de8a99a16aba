"""Trend aggregates over a trailing window of days.

Unlike the insight generator, trend views use absolute amounts so refunds and
sign conventions of different sources do not cancel each other out. Each
helper takes the zone decisions as a ``transaction id -> Zone`` mapping (see
:func:`spending_zones.insights.zone_lookup`); missing ids are uncategorized.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from .models import SUBSTANTIVE_ZONES, Transaction, Zone
from .money import ZERO

_DAYS_PER_MONTH = Decimal("30")
_HUNDRED = Decimal("100")

ZONE_LABELS: dict[Zone, str] = {
    Zone.GREEN: "Essentials",
    Zone.YELLOW: "Discretionary",
    Zone.RED: "Avoidable",
    Zone.UNCATEGORIZED: "Uncategorized",
}

WEEKDAY_NAMES: tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def _zone_of(tx: Transaction, zones: Mapping[str, Zone]) -> Zone:
    return zones.get(tx.id, Zone.UNCATEGORIZED)


def _empty_zone_totals() -> dict[Zone, Decimal]:
    return {z: ZERO for z in Zone}


def filter_window(
    transactions: Iterable[Transaction], days: int, *, today: date
) -> list[Transaction]:
    """Keep dated transactions from the last ``days`` calendar days, today included."""

    if days <= 0:
        raise ValueError("days must be a positive integer")
    cutoff = today - timedelta(days=days - 1)
    return [tx for tx in transactions if tx.date is not None and cutoff <= tx.date <= today]


@dataclass(frozen=True, slots=True)
class ZoneShare:
    label: str
    zone: Zone
    amount: Decimal


def zone_distribution(
    transactions: Iterable[Transaction], zones: Mapping[str, Zone]
) -> list[ZoneShare]:
    totals = _empty_zone_totals()
    for tx in transactions:
        totals[_zone_of(tx, zones)] += abs(tx.amount)
    return [
        ZoneShare(label=ZONE_LABELS[z], zone=z, amount=totals[z])
        for z in (*SUBSTANTIVE_ZONES, Zone.UNCATEGORIZED)
        if totals[z] > ZERO
    ]


@dataclass(slots=True)
class MerchantTotal:
    name: str
    amount: Decimal
    zone: Zone
    count: int


def top_merchants(
    transactions: Iterable[Transaction], zones: Mapping[str, Zone], *, limit: int = 10
) -> list[MerchantTotal]:
    """Merchants ranked by absolute spend; ``zone`` is the first zone seen."""

    by_name: dict[str, MerchantTotal] = {}
    for tx in transactions:
        name = tx.merchant_name or "Unknown"
        entry = by_name.get(name)
        if entry is None:
            entry = by_name[name] = MerchantTotal(
                name=name, amount=ZERO, zone=_zone_of(tx, zones), count=0
            )
        entry.amount += abs(tx.amount)
        entry.count += 1
    ranked = sorted(by_name.values(), key=lambda m: m.amount, reverse=True)
    return ranked[:limit]


@dataclass(slots=True)
class DayBucket:
    label: str
    totals: dict[Zone, Decimal] = field(default_factory=_empty_zone_totals)

    @property
    def total(self) -> Decimal:
        return sum(self.totals.values(), ZERO)


def weekly_pattern(
    transactions: Iterable[Transaction], zones: Mapping[str, Zone]
) -> list[DayBucket]:
    """Categorized spend per weekday, Sunday first."""

    buckets = [DayBucket(label=name) for name in WEEKDAY_NAMES]
    for tx in transactions:
        zone = _zone_of(tx, zones)
        if zone == Zone.UNCATEGORIZED or tx.date is None:
            continue
        # date.weekday() is Monday=0; shift so Sunday=0.
        buckets[(tx.date.weekday() + 1) % 7].totals[zone] += abs(tx.amount)
    return buckets


def daily_totals(
    transactions: Iterable[Transaction],
    zones: Mapping[str, Zone],
    *,
    days: int,
    today: date,
) -> list[DayBucket]:
    """One bucket per calendar day, oldest first, labelled ``YYYY-MM-DD``."""

    if days <= 0:
        raise ValueError("days must be a positive integer")
    start = today - timedelta(days=days - 1)
    buckets = [DayBucket(label=(start + timedelta(days=i)).isoformat()) for i in range(days)]
    for tx in transactions:
        if tx.date is None or not start <= tx.date <= today:
            continue
        buckets[(tx.date - start).days].totals[_zone_of(tx, zones)] += abs(tx.amount)
    return buckets


def projected_monthly(window_total: Decimal, window_days: int) -> Decimal:
    """Average daily spend over the window scaled to a 30-day month."""

    if window_days <= 0:
        return ZERO
    return window_total / Decimal(window_days) * _DAYS_PER_MONTH


@dataclass(frozen=True, slots=True)
class SavingsOutlook:
    monthly_savings: Decimal
    savings_rate: Decimal
    spending_rate: Decimal
    status: str


def savings_outlook(monthly_income: Decimal, projected_spending: Decimal) -> SavingsOutlook:
    """Compare projected spending with income; rates are percentages."""

    savings = monthly_income - projected_spending
    if monthly_income > ZERO:
        rate = savings / monthly_income * _HUNDRED
        spending_rate = projected_spending / monthly_income * _HUNDRED
    else:
        rate = ZERO
        spending_rate = ZERO

    if rate >= 20:
        status = "Excellent"
    elif rate >= 10:
        status = "Good"
    elif rate >= 0:
        status = "Thin margins"
    else:
        status = "Over budget"
    return SavingsOutlook(
        monthly_savings=savings,
        savings_rate=rate,
        spending_rate=spending_rate,
        status=status,
    )


__all__ = [
    "ZONE_LABELS",
    "WEEKDAY_NAMES",
    "filter_window",
    "ZoneShare",
    "zone_distribution",
    "MerchantTotal",
    "top_merchants",
    "DayBucket",
    "weekly_pattern",
    "daily_totals",
    "projected_monthly",
    "SavingsOutlook",
    "savings_outlook",
]
