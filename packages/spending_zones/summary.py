"""Dashboard statistics: zone totals and the spending health score."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from .insights import build_snapshot
from .models import Categorization, Transaction, Zone
from .money import ZERO, percent, round_whole

_HALF = Decimal("0.5")
_HUNDRED = Decimal("100")


@dataclass(frozen=True, slots=True)
class ZoneSummary:
    total_transactions: int
    categorized: int
    uncategorized: int
    green_amount: Decimal
    yellow_amount: Decimal
    red_amount: Decimal
    health_score: int

    @property
    def total_amount(self) -> Decimal:
        return self.green_amount + self.yellow_amount + self.red_amount


def calculate_health_score(green: Decimal, yellow: Decimal, red: Decimal) -> int:
    """Score 0-100: essentials count fully, discretionary half, avoidable not at all.

    With no categorized spending there is nothing to criticize, so the score
    is 100.
    """

    total = green + yellow + red
    if total <= ZERO:
        return 100
    score = int(round_whole((green + yellow * _HALF) / total * _HUNDRED))
    return max(0, min(100, score))


def summarize_zones(
    transactions: Iterable[Transaction],
    categorizations: Iterable[Categorization],
) -> ZoneSummary:
    snap = build_snapshot(transactions, categorizations)
    green = snap.zone_total(Zone.GREEN)
    yellow = snap.zone_total(Zone.YELLOW)
    red = snap.zone_total(Zone.RED)
    return ZoneSummary(
        total_transactions=snap.transaction_count,
        categorized=snap.categorized_count,
        uncategorized=snap.uncategorized_count,
        green_amount=green,
        yellow_amount=yellow,
        red_amount=red,
        health_score=calculate_health_score(green, yellow, red),
    )


def health_greeting(score: int) -> str:
    if score >= 80:
        return "Looking good."
    if score >= 60:
        return "Room for improvement."
    if score >= 40:
        return "Your wallet is concerned."
    return "Time for tough love."


def health_message(score: int) -> str:
    if score >= 80:
        return "Strong financial discipline"
    if score >= 60:
        return "Good, but reduce Yellow/Red"
    if score >= 40:
        return "Too much discretionary spending"
    return "Red zone needs attention"


def spending_tip(summary: ZoneSummary) -> str:
    """One-line nudge based on the red and yellow shares."""

    total = summary.total_amount
    if total > ZERO and summary.red_amount > total * Decimal("0.2"):
        return (
            f"{percent(summary.red_amount, total)}% Red zone. "
            "That money could be building your future."
        )
    if total > ZERO and summary.yellow_amount > total * Decimal("0.4"):
        return "Heavy Yellow spending. How many of those purchases will you remember next month?"
    return "Keep categorizing honestly. Self-awareness is the first step to financial freedom."


__all__ = [
    "ZoneSummary",
    "calculate_health_score",
    "summarize_zones",
    "health_greeting",
    "health_message",
    "spending_tip",
]
