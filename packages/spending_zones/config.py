"""Business constants for insight generation.

Every threshold and multiplier used by :mod:`spending_zones.insights` lives in
:class:`InsightThresholds` so it can be reviewed in one place and overridden
per call (``generate_insights(..., thresholds=...)``) without touching rule
code. Environment variables recognized by the package:

- ``SPENDING_ZONES_LOG_LEVEL``: log level for :func:`configure_logging`.
- ``SPENDING_ZONES_RULES_FILE``: JSON rule table used by the CLI when no
  ``--rules`` option is given.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal

RULES_FILE_ENV_VAR = "SPENDING_ZONES_RULES_FILE"


@dataclass(frozen=True, slots=True)
class InsightThresholds:
    # Zone shares of categorized spending (fractions)
    red_share_alert: Decimal = Decimal("0.20")
    discretionary_share_alert: Decimal = Decimal("0.50")
    green_share_win: Decimal = Decimal("0.70")
    red_share_win: Decimal = Decimal("0.10")

    # Merchant totals (currency units); triggers are strict "greater than"
    coffee_total: Decimal = Decimal("50")
    delivery_total: Decimal = Decimal("0")
    fast_food_total: Decimal = Decimal("100")
    amazon_total: Decimal = Decimal("200")
    streaming_total: Decimal = Decimal("50")
    gambling_total: Decimal = Decimal("0")

    # Income-based (percent of income for savings, fraction for red)
    savings_rate_warning: Decimal = Decimal("10")
    savings_rate_win: Decimal = Decimal("20")
    red_income_share: Decimal = Decimal("0.10")

    # Projections
    coffee_yearly_multiplier: Decimal = Decimal("4")
    red_savings_multiplier: Decimal = Decimal("6")

    uncategorized_count: int = 5

    # Merchant substrings (matched against lowercased merchant-or-description)
    coffee_merchants: tuple[str, ...] = ("starbucks", "dunkin", "coffee")
    delivery_merchants: tuple[str, ...] = ("doordash", "uber eats", "grubhub", "postmates")
    fast_food_merchants: tuple[str, ...] = ("mcdonald", "burger king", "wendy", "taco bell")
    amazon_merchants: tuple[str, ...] = ("amazon", "amzn")
    gambling_merchants: tuple[str, ...] = ("draftkings", "fanduel", "bet", "casino")

    # Category-label substrings (case-sensitive, as labels are display text)
    streaming_categories: tuple[str, ...] = ("Streaming", "Music")


DEFAULT_THRESHOLDS = InsightThresholds()


def rules_file_from_env() -> str | None:
    """Return ``SPENDING_ZONES_RULES_FILE`` when set to a non-blank value."""

    value = os.getenv(RULES_FILE_ENV_VAR)
    if value and value.strip():
        return value.strip()
    return None


__all__ = [
    "RULES_FILE_ENV_VAR",
    "InsightThresholds",
    "DEFAULT_THRESHOLDS",
    "rules_file_from_env",
]
