"""Static rule tables for zone classification.

Rules are plain immutable data grouped by zone. Declared order matters: the
classifier scans GREEN, then YELLOW, then RED, and within a table from top to
bottom, returning on the first pattern found. Overlaps (for example ``"pub "``
in both Dining Out and Alcohol) therefore resolve to the earlier rule.

Tables can also be supplied as JSON-shaped configuration through
:func:`load_rules` / :func:`load_rules_file`; the zone order is fixed
regardless of the payload's key order.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from os import PathLike
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .models import CategoryRule, Zone

# ---------------------------------------------------------------------------
# Confidence tiers
# ---------------------------------------------------------------------------

PATTERN_MATCH_CONFIDENCE = 0.85
BILL_PAYMENT_CONFIDENCE = 0.6
TRANSFER_CONFIDENCE = 0.5
DINING_CONFIDENCE = 0.65
RETAIL_CONFIDENCE = 0.55
SMALL_PURCHASE_CONFIDENCE = 0.45
MEDIUM_PURCHASE_CONFIDENCE = 0.4
MID_PURCHASE_CONFIDENCE = 0.35
LARGE_PURCHASE_CONFIDENCE = 0.4
FALLBACK_CONFIDENCE = 0.3


def _rule(zone: Zone, category: str, *patterns: str) -> CategoryRule:
    return CategoryRule(patterns=patterns, zone=zone, category=category)


# ---------------------------------------------------------------------------
# GREEN: essentials (needs, bills, investments)
# ---------------------------------------------------------------------------

GREEN_RULES: tuple[CategoryRule, ...] = (
    _rule(Zone.GREEN, "Housing", "mortgage", "rent", "property tax"),
    _rule(
        Zone.GREEN,
        "Utilities",
        "electric",
        "gas bill",
        "water bill",
        "utility",
        "eversource",
        "national grid",
        "psnh",
    ),
    _rule(
        Zone.GREEN,
        "Healthcare",
        "health insurance",
        "medical",
        "pharmacy",
        "cvs pharmacy",
        "walgreens rx",
        "doctor",
        "hospital",
        "dental",
        "vision",
    ),
    _rule(
        Zone.GREEN,
        "Groceries",
        "grocery",
        "market basket",
        "stop & shop",
        "stop and shop",
        "trader joe",
        "whole foods",
        "aldi",
        "hannaford",
        "shaws",
        "wegmans",
        "costco",
        "bjs wholesale",
        "sams club",
    ),
    _rule(
        Zone.GREEN,
        "Insurance",
        "car insurance",
        "auto insurance",
        "geico",
        "progressive",
        "state farm",
        "allstate",
        "liberty mutual",
    ),
    _rule(
        Zone.GREEN,
        "Auto Loan",
        "car payment",
        "auto loan",
        "toyota financial",
        "honda financial",
        "ford credit",
    ),
    _rule(Zone.GREEN, "Student Loans", "student loan", "nelnet", "navient", "great lakes", "fedloan"),
    _rule(Zone.GREEN, "Childcare/Education", "daycare", "childcare", "tuition", "school fee"),
    _rule(
        Zone.GREEN,
        "Investments",
        "401k",
        "ira",
        "vanguard",
        "fidelity investment",
        "schwab",
        "retirement",
    ),
    _rule(Zone.GREEN, "Savings", "savings transfer", "emergency fund"),
    _rule(Zone.GREEN, "Internet", "internet", "comcast", "xfinity", "verizon fios", "spectrum"),
    _rule(Zone.GREEN, "Phone", "cell phone", "verizon wireless", "t-mobile", "at&t wireless", "sprint"),
    _rule(
        Zone.GREEN,
        "Gas/Fuel",
        "gas station",
        "shell",
        "exxon",
        "mobil",
        "bp ",
        "sunoco",
        "cumberland farms",
        "irving",
        "chevron",
        "fuel",
    ),
)

# ---------------------------------------------------------------------------
# YELLOW: discretionary but reasonable
# ---------------------------------------------------------------------------

YELLOW_RULES: tuple[CategoryRule, ...] = (
    _rule(Zone.YELLOW, "Online Shopping", "amazon", "amzn", "amazon prime"),
    _rule(
        Zone.YELLOW,
        "Retail",
        "target",
        "walmart",
        "kohls",
        "tjmaxx",
        "marshalls",
        "homegoods",
        "bed bath",
    ),
    _rule(
        Zone.YELLOW,
        "Streaming",
        "netflix",
        "hulu",
        "disney+",
        "disney plus",
        "hbo max",
        "peacock",
        "paramount+",
        "apple tv",
        "youtube premium",
    ),
    _rule(Zone.YELLOW, "Music/Audio", "spotify", "apple music", "pandora", "audible"),
    _rule(
        Zone.YELLOW,
        "Fitness",
        "gym",
        "planet fitness",
        "anytime fitness",
        "orange theory",
        "crossfit",
        "ymca",
        "peloton",
    ),
    _rule(Zone.YELLOW, "Home Improvement", "home depot", "lowes", "ace hardware", "menards"),
    _rule(Zone.YELLOW, "Pet Supplies", "pet supplies", "petco", "petsmart", "chewy"),
    _rule(Zone.YELLOW, "Personal Care", "hair salon", "barber", "nail salon", "spa", "massage"),
    _rule(Zone.YELLOW, "Laundry", "dry cleaner", "laundry"),
    _rule(Zone.YELLOW, "Rideshare", "uber ", "lyft", "taxi", "cab "),
    _rule(Zone.YELLOW, "Parking", "parking", "meter"),
    _rule(
        Zone.YELLOW,
        "Fast Casual",
        "chipotle",
        "panera",
        "subway",
        "five guys",
        "shake shack",
        "chick-fil-a",
        "wendys",
        "burger king",
        "taco bell",
        "kfc",
        "popeyes",
    ),
    _rule(
        Zone.YELLOW,
        "Dining Out",
        "restaurant",
        "grille",
        "bistro",
        "cafe",
        "diner",
        "kitchen",
        "eatery",
        "tavern",
        "pub ",
    ),
)

# ---------------------------------------------------------------------------
# RED: avoidable (impulsive, wasteful or harmful)
# ---------------------------------------------------------------------------

RED_RULES: tuple[CategoryRule, ...] = (
    _rule(
        Zone.RED,
        "Ice Cream",
        "ice cream",
        "coldstone",
        "baskin robbins",
        "dairy queen",
        "dq ",
        "friendlys",
        "ben & jerry",
        "ben and jerry",
    ),
    _rule(Zone.RED, "Coffee Shops", "starbucks", "dunkin", "coffee shop", "caribou coffee", "peets coffee"),
    _rule(
        Zone.RED,
        "Fast Food",
        "mcdonald",
        "mcdonalds",
        "wendys drive",
        "burger king drive",
        "taco bell drive",
        "fast food",
    ),
    _rule(
        Zone.RED,
        "Alcohol",
        "bar ",
        "liquor",
        "wine store",
        "beer store",
        "brewery",
        "taproom",
        "pub ",
        "tavern",
        "alcohol",
    ),
    _rule(
        Zone.RED,
        "Gambling",
        "casino",
        "gambling",
        "lottery",
        "draftkings",
        "fanduel",
        "betmgm",
        "caesars sports",
        "barstool",
    ),
    _rule(
        Zone.RED,
        "Delivery Apps",
        "doordash",
        "uber eats",
        "ubereats",
        "grubhub",
        "postmates",
        "seamless",
        "instacart",
    ),
    _rule(Zone.RED, "Snacks", "candy", "vending", "snack"),
    _rule(Zone.RED, "Gaming", "game", "playstation", "xbox", "nintendo", "steam", "epic games", "gaming"),
    _rule(Zone.RED, "Tobacco", "tobacco", "smoke shop", "vape"),
    _rule(Zone.RED, "Adult Entertainment", "strip club", "adult", "onlyfans"),
    _rule(Zone.RED, "Impulse Shopping", "fashion nova", "shein", "wish.com", "aliexpress"),
    _rule(Zone.RED, "Fees/Penalties", "late fee", "overdraft", "nsf fee", "penalty"),
    _rule(Zone.RED, "Bank Fees", "atm fee", "foreign transaction", "service charge"),
)

ALL_RULES: tuple[CategoryRule, ...] = GREEN_RULES + YELLOW_RULES + RED_RULES


def get_category_rules() -> dict[str, tuple[CategoryRule, ...]]:
    """Return the built-in tables keyed by lowercase zone name for display/editing."""

    return {"green": GREEN_RULES, "yellow": YELLOW_RULES, "red": RED_RULES}


# ---------------------------------------------------------------------------
# Keyword heuristics (used only when no rule pattern matched)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class KeywordHeuristic:
    keywords: tuple[str, ...]
    zone: Zone
    category: str
    confidence: float
    reasoning: str


KEYWORD_HEURISTICS: tuple[KeywordHeuristic, ...] = (
    KeywordHeuristic(
        keywords=("payment", "bill pay", "autopay", "direct debit"),
        zone=Zone.GREEN,
        category="Bill Payment",
        confidence=BILL_PAYMENT_CONFIDENCE,
        reasoning="Appears to be a bill payment or scheduled payment",
    ),
    KeywordHeuristic(
        keywords=("transfer", "xfer", "zelle", "venmo", "paypal"),
        zone=Zone.YELLOW,
        category="Transfer",
        confidence=TRANSFER_CONFIDENCE,
        reasoning="Money transfer - review if this was necessary",
    ),
    KeywordHeuristic(
        keywords=("restaurant", "grill", "kitchen", "cafe", "pizza", "burger", "food", "dining"),
        zone=Zone.YELLOW,
        category="Dining Out",
        confidence=DINING_CONFIDENCE,
        reasoning="Appears to be a restaurant or food purchase",
    ),
    KeywordHeuristic(
        # No bare "shop": unknown "... Shop" merchants fall through to the amount bands.
        keywords=("store", "mart", "retail", "outlet", "mall"),
        zone=Zone.YELLOW,
        category="Shopping",
        confidence=RETAIL_CONFIDENCE,
        reasoning="Retail purchase - consider if this was planned",
    ),
)


# ---------------------------------------------------------------------------
# Loading rule tables from configuration
# ---------------------------------------------------------------------------


class _RuleSpec(BaseModel):
    """Typed view of one configured rule (zone comes from the enclosing key)."""

    model_config = ConfigDict(extra="forbid")

    patterns: list[str]
    category: str

    @field_validator("patterns")
    @classmethod
    def _patterns_non_empty(cls, v: list[str]) -> list[str]:
        # Whitespace is significant inside patterns ("bp ", "pub "), so only
        # reject patterns that are entirely blank.
        if not v or any(not p.strip() for p in v):
            raise ValueError("patterns must be a non-empty list of non-blank strings")
        return [p.lower() for p in v]

    @field_validator("category")
    @classmethod
    def _category_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("category must be non-empty")
        return v.strip()


_ZONE_KEYS: tuple[tuple[str, Zone], ...] = (
    ("green", Zone.GREEN),
    ("yellow", Zone.YELLOW),
    ("red", Zone.RED),
)


def load_rules(payload: Mapping[str, Any]) -> tuple[CategoryRule, ...]:
    """Build a concatenated rule table from a JSON-shaped mapping.

    Expected shape::

        {"green": [{"patterns": ["rent"], "category": "Housing"}, ...],
         "yellow": [...], "red": [...]}

    Missing zone keys are treated as empty tables. Unknown top-level keys or
    malformed rules raise ``ValueError``.
    """

    if not isinstance(payload, Mapping):
        raise ValueError("Invalid rule table: expected a JSON object at top level")

    allowed = {key for key, _ in _ZONE_KEYS}
    unknown = sorted(str(k) for k in payload if str(k).lower() not in allowed)
    if unknown:
        raise ValueError(f"Invalid rule table: unknown zone keys {unknown}")
    by_key = {str(k).lower(): v for k, v in payload.items()}

    rules: list[CategoryRule] = []
    for key, zone in _ZONE_KEYS:
        items = by_key.get(key) or []
        if not isinstance(items, Sequence) or isinstance(items, str):
            raise ValueError(f"Invalid rule table: {key!r} must be a list")
        for pos, item in enumerate(items):
            try:
                spec = _RuleSpec.model_validate(item)
            except ValidationError as exc:
                raise ValueError(f"Invalid rule {key}[{pos}]: {exc}") from exc
            rules.append(CategoryRule(patterns=tuple(spec.patterns), zone=zone, category=spec.category))
    return tuple(rules)


def load_rules_file(path: str | PathLike[str]) -> tuple[CategoryRule, ...]:
    """Read a JSON rule table from ``path`` (see :func:`load_rules`)."""

    with open(path, encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid rule table JSON in {path}: {exc}") from exc
    return load_rules(payload)


__all__ = [
    "PATTERN_MATCH_CONFIDENCE",
    "BILL_PAYMENT_CONFIDENCE",
    "TRANSFER_CONFIDENCE",
    "DINING_CONFIDENCE",
    "RETAIL_CONFIDENCE",
    "SMALL_PURCHASE_CONFIDENCE",
    "MEDIUM_PURCHASE_CONFIDENCE",
    "MID_PURCHASE_CONFIDENCE",
    "LARGE_PURCHASE_CONFIDENCE",
    "FALLBACK_CONFIDENCE",
    "GREEN_RULES",
    "YELLOW_RULES",
    "RED_RULES",
    "ALL_RULES",
    "KeywordHeuristic",
    "KEYWORD_HEURISTICS",
    "get_category_rules",
    "load_rules",
    "load_rules_file",
]
