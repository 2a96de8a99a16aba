"""Spending insight generation.

Insights are derived, never stored: each call aggregates the current
transactions and zone decisions into one :class:`SpendingSnapshot`, then runs
an ordered list of independent rules against it. A rule reads the snapshot
(plus optional monthly income and the thresholds) and returns at most one
:class:`~spending_zones.models.SpendingInsight`; rules never see each other's
output. The final list is stable-sorted by priority, highest first.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from .config import DEFAULT_THRESHOLDS, InsightThresholds
from .logging_setup import get_logger
from .models import (
    SUBSTANTIVE_ZONES,
    Categorization,
    SpendingInsight,
    Transaction,
    Zone,
    coerce_zone,
)
from .money import ZERO, as_decimal, fmt_dollars, percent, round_whole, share

logger = get_logger("spending_zones.insights")

_HUNDRED = Decimal("100")

# ---------------------------------------------------------------------------
# Aggregate snapshot
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Tally:
    """Running total/count with the most recent non-empty zone seen."""

    total: Decimal = ZERO
    count: int = 0
    zone: Zone | None = None

    def add(self, amount: Decimal, zone: Zone | None = None) -> None:
        self.total += amount
        self.count += 1
        if zone is not None:
            self.zone = zone


@dataclass(frozen=True, slots=True)
class SpendingSnapshot:
    """Aggregates over one consistent transaction/categorization snapshot.

    ``zones`` covers GREEN/YELLOW/RED only. ``merchants`` is keyed by the
    lowercased merchant name (or description) and includes uncategorized
    transactions. ``categories`` is keyed by each transaction's default
    category label and only counts categorized transactions.
    """

    transaction_count: int
    zones: Mapping[Zone, Tally] = field(default_factory=dict)
    merchants: Mapping[str, Tally] = field(default_factory=dict)
    categories: Mapping[str, Tally] = field(default_factory=dict)

    def zone_total(self, zone: Zone) -> Decimal:
        tally = self.zones.get(zone)
        return tally.total if tally else ZERO

    @property
    def total(self) -> Decimal:
        """Total categorized spending (GREEN + YELLOW + RED)."""

        return sum((self.zone_total(z) for z in SUBSTANTIVE_ZONES), ZERO)

    @property
    def categorized_count(self) -> int:
        return sum(t.count for t in self.zones.values())

    @property
    def uncategorized_count(self) -> int:
        return self.transaction_count - self.categorized_count

    def merchant_total(self, needles: Iterable[str]) -> Decimal:
        needles = tuple(needles)
        return sum(
            (t.total for m, t in self.merchants.items() if any(n in m for n in needles)),
            ZERO,
        )

    def merchant_count(self, needles: Iterable[str]) -> int:
        needles = tuple(needles)
        return sum(t.count for m, t in self.merchants.items() if any(n in m for n in needles))

    def category_total(self, needles: Iterable[str]) -> Decimal:
        needles = tuple(needles)
        return sum(
            (t.total for c, t in self.categories.items() if any(n in c for n in needles)),
            ZERO,
        )


def zone_lookup(categorizations: Iterable[Categorization]) -> dict[str, Zone]:
    """Map transaction id to decided zone, dropping ``UNCATEGORIZED`` entries."""

    return {
        c.transaction_id: zone
        for c in categorizations
        if (zone := coerce_zone(c.zone)) != Zone.UNCATEGORIZED
    }


def build_snapshot(
    transactions: Iterable[Transaction],
    categorizations: Iterable[Categorization],
) -> SpendingSnapshot:
    """Aggregate zone, merchant and category totals in a single pass."""

    zone_by_id = zone_lookup(categorizations)
    zones: dict[Zone, Tally] = {z: Tally() for z in SUBSTANTIVE_ZONES}
    merchants: dict[str, Tally] = {}
    categories: dict[str, Tally] = {}

    count = 0
    for tx in transactions:
        count += 1
        zone = zone_by_id.get(tx.id)
        amount = as_decimal(tx.amount)

        merchants.setdefault(tx.merchant_key, Tally()).add(amount, zone)
        if zone is None:
            continue
        categories.setdefault(tx.default_category or "Uncategorized", Tally()).add(amount, zone)
        zones[zone].add(amount, zone)

    return SpendingSnapshot(
        transaction_count=count,
        zones=zones,
        merchants=merchants,
        categories=categories,
    )


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

type InsightRule = Callable[
    [SpendingSnapshot, Decimal | None, InsightThresholds], SpendingInsight | None
]


def red_zone_alert(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    red = snap.zone_total(Zone.RED)
    ratio = share(red, snap.total)
    if ratio is None or ratio <= th.red_share_alert:
        return None
    return SpendingInsight(
        kind="warning",
        title="Red Zone Alert",
        message=(
            f"{percent(red, snap.total)}% of your spending is in the Red Zone. "
            "Every dollar here is money you'll never see again."
        ),
        impact=f"{fmt_dollars(red)} wasted this period",
        priority=10,
    )


def discretionary_alert(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    wants = snap.zone_total(Zone.YELLOW) + snap.zone_total(Zone.RED)
    ratio = share(wants, snap.total)
    if ratio is None or ratio <= th.discretionary_share_alert:
        return None
    return SpendingInsight(
        kind="warning",
        title="Discretionary Spending Too High",
        message=(
            "More than half your money is going to wants, not needs. "
            "You're trading future freedom for present comfort."
        ),
        priority=9,
    )


def coffee_habit(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    spent = snap.merchant_total(th.coffee_merchants)
    if spent <= th.coffee_total:
        return None
    # Treats the snapshot as roughly a month of data.
    yearly = spent * th.coffee_yearly_multiplier
    return SpendingInsight(
        kind="action",
        title="Coffee Shop Habit",
        message=f"{fmt_dollars(spent)} on coffee shops. Make coffee at home and invest the difference.",
        impact=f"{fmt_dollars(yearly)}/year if this continues",
        priority=7,
    )


def delivery_drain(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    spent = snap.merchant_total(th.delivery_merchants)
    if spent <= th.delivery_total:
        return None
    return SpendingInsight(
        kind="action",
        title="Delivery App Drain",
        message=(
            f"{fmt_dollars(spent)} on delivery apps. "
            "The fees alone could fund a nice home-cooked meal."
        ),
        impact="Delivery fees typically add 30-40% to food cost",
        priority=8,
    )


def fast_food(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    spent = snap.merchant_total(th.fast_food_merchants)
    if spent <= th.fast_food_total:
        return None
    return SpendingInsight(
        kind="warning",
        title="Fast Food Adding Up",
        message=f"{fmt_dollars(spent)} on fast food. Your wallet and health both pay the price.",
        priority=6,
    )


def amazon_check(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    spent = snap.merchant_total(th.amazon_merchants)
    if spent <= th.amazon_total:
        return None
    orders = snap.merchant_count(th.amazon_merchants)
    return SpendingInsight(
        kind="tip",
        title="Amazon Impulse Check",
        message=(
            f"{orders} Amazon orders totaling {fmt_dollars(spent)}. "
            'Try the 24-hour rule before clicking "Buy Now."'
        ),
        priority=6,
    )


def subscription_stack(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    spent = snap.category_total(th.streaming_categories)
    if spent <= th.streaming_total:
        return None
    return SpendingInsight(
        kind="tip",
        title="Subscription Stack",
        message=f"{fmt_dollars(spent)} on streaming services. Are you really watching all of them?",
        priority=5,
    )


def gambling_alert(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    spent = snap.merchant_total(th.gambling_merchants)
    if spent <= th.gambling_total:
        return None
    return SpendingInsight(
        kind="warning",
        title="Gambling Alert",
        message=(
            f"{fmt_dollars(spent)} on gambling. The house always wins - "
            'be honest about entertainment vs. "investing."'
        ),
        priority=10,
    )


def strong_discipline(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    green = snap.zone_total(Zone.GREEN)
    ratio = share(green, snap.total)
    if ratio is None or ratio <= th.green_share_win:
        return None
    return SpendingInsight(
        kind="win",
        title="Strong Financial Discipline",
        message=(
            f"{percent(green, snap.total)}% of spending on essentials. "
            "You're building real wealth habits."
        ),
        priority=4,
    )


def red_zone_under_control(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    red = snap.zone_total(Zone.RED)
    ratio = share(red, snap.total)
    if ratio is None or red <= ZERO or ratio >= th.red_share_win:
        return None
    return SpendingInsight(
        kind="win",
        title="Red Zone Under Control",
        message=(
            "Less than 10% in the Red Zone. "
            "You're making conscious choices about impulse spending."
        ),
        priority=3,
    )


def savings_rate(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    if income is None or income <= ZERO:
        return None
    rate = (income - snap.total) / income * _HUNDRED
    shown = f"{round_whole(rate):f}"
    if rate < th.savings_rate_warning:
        return SpendingInsight(
            kind="warning",
            title="Savings Rate Critical",
            message=(
                f"Only saving {shown}% of income. "
                "Aim for at least 20% to build real financial security."
            ),
            priority=9,
        )
    if rate >= th.savings_rate_win:
        return SpendingInsight(
            kind="win",
            title="Great Savings Rate",
            message=f"{shown}% savings rate. Keep this up and financial freedom is inevitable.",
            priority=4,
        )
    return None


def red_zone_vs_income(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    if income is None or income <= ZERO:
        return None
    red = snap.zone_total(Zone.RED)
    if red <= income * th.red_income_share:
        return None
    return SpendingInsight(
        kind="action",
        title="Red Zone vs Income",
        message=(
            f"Red Zone spending is {percent(red, income)}% of your income. "
            "Cut this in half and invest the difference."
        ),
        impact=f"{fmt_dollars(red * th.red_savings_multiplier)}/year potential savings",
        priority=8,
    )


def complete_review(
    snap: SpendingSnapshot, income: Decimal | None, th: InsightThresholds
) -> SpendingInsight | None:
    pending = snap.uncategorized_count
    if pending <= th.uncategorized_count:
        return None
    return SpendingInsight(
        kind="action",
        title="Complete Your Review",
        message=f"{pending} transactions still need categorizing. Full awareness requires full data.",
        priority=5,
    )


# Evaluation order is also the tie-break order for equal priorities.
INSIGHT_RULES: tuple[InsightRule, ...] = (
    red_zone_alert,
    discretionary_alert,
    coffee_habit,
    delivery_drain,
    fast_food,
    amazon_check,
    subscription_stack,
    gambling_alert,
    strong_discipline,
    red_zone_under_control,
    savings_rate,
    red_zone_vs_income,
    complete_review,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_insights(
    transactions: Iterable[Transaction],
    categorizations: Iterable[Categorization],
    monthly_income: Decimal | int | float | None = None,
    *,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
    rules: Iterable[InsightRule] = INSIGHT_RULES,
) -> list[SpendingInsight]:
    """Return insights for a transaction set, highest priority first.

    ``categorizations`` must be a stable snapshot of the user's decisions;
    transactions without one count as uncategorized. Income-based rules run
    only for a positive ``monthly_income``. Equal priorities keep rule order.
    """

    snap = build_snapshot(transactions, categorizations)
    income = as_decimal(monthly_income) if monthly_income is not None else None

    produced: list[SpendingInsight] = []
    for rule in rules:
        insight = rule(snap, income, thresholds)
        if insight is not None:
            logger.debug("insight %s fired (priority=%d)", rule.__name__, insight.priority)
            produced.append(insight)

    return sorted(produced, key=lambda i: i.priority, reverse=True)


def get_headline_insight(
    transactions: Iterable[Transaction],
    categorizations: Iterable[Categorization],
    monthly_income: Decimal | int | float | None = None,
    *,
    thresholds: InsightThresholds = DEFAULT_THRESHOLDS,
) -> SpendingInsight | None:
    """Return the single most urgent insight, or ``None`` when there are none."""

    insights = generate_insights(
        transactions, categorizations, monthly_income, thresholds=thresholds
    )
    return insights[0] if insights else None


__all__ = [
    "Tally",
    "SpendingSnapshot",
    "InsightRule",
    "INSIGHT_RULES",
    "zone_lookup",
    "build_snapshot",
    "generate_insights",
    "get_headline_insight",
]
