"""Rule-based zone classification for single transactions.

:func:`classify` is total: for any merchant/description/amount it returns
exactly one :class:`~spending_zones.models.ClassificationResult`. Resolution
order is fixed:

1. rule patterns (GREEN, then YELLOW, then RED tables; first match wins);
2. keyword heuristics (bill payment, transfer, dining, retail);
3. amount bands for unknown merchants with a positive amount;
4. a low-confidence YELLOW fallback.

History-based suggestions (:func:`suggest_zone_from_history`) sit in front
of the classifier for merchants the user has already categorized.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from decimal import Decimal

from .logging_setup import get_logger
from .models import (
    ClassificationResult,
    CategoryRule,
    HistoryEntry,
    Transaction,
    Zone,
)
from .money import ZERO, as_decimal, fmt_dollars
from .rules import (
    ALL_RULES,
    FALLBACK_CONFIDENCE,
    KEYWORD_HEURISTICS,
    LARGE_PURCHASE_CONFIDENCE,
    MEDIUM_PURCHASE_CONFIDENCE,
    MID_PURCHASE_CONFIDENCE,
    PATTERN_MATCH_CONFIDENCE,
    SMALL_PURCHASE_CONFIDENCE,
)

logger = get_logger("spending_zones.classify")

_SMALL_PURCHASE_LIMIT = Decimal("10")
_MEDIUM_PURCHASE_LIMIT = Decimal("50")
_LARGE_PURCHASE_LIMIT = Decimal("200")

# Minimum prior categorizations of a merchant before history overrides rules.
HISTORY_MIN_OCCURRENCES = 2


def _search_text(merchant_name: str | None, description: str | None) -> str:
    return f"{merchant_name or ''} {description or ''}".lower()


def _match_rules(text: str, rules: Sequence[CategoryRule]) -> ClassificationResult | None:
    for rule in rules:
        for pattern in rule.patterns:
            if pattern in text:
                return ClassificationResult(
                    zone=rule.zone,
                    category=rule.category,
                    confidence=PATTERN_MATCH_CONFIDENCE,
                    reasoning=f'Matched "{pattern}" -> {rule.category}',
                )
    return None


def _match_keywords(text: str) -> ClassificationResult | None:
    for heuristic in KEYWORD_HEURISTICS:
        if any(k in text for k in heuristic.keywords):
            return ClassificationResult(
                zone=heuristic.zone,
                category=heuristic.category,
                confidence=heuristic.confidence,
                reasoning=heuristic.reasoning,
            )
    return None


def _classify_by_amount(amount: Decimal) -> ClassificationResult:
    if amount.is_finite() and amount > ZERO:
        if amount < _SMALL_PURCHASE_LIMIT:
            return ClassificationResult(
                zone=Zone.RED,
                category="Small Purchase",
                confidence=SMALL_PURCHASE_CONFIDENCE,
                reasoning=f"Small {fmt_dollars(amount)} purchase - often impulse buys add up",
            )
        if amount < _MEDIUM_PURCHASE_LIMIT:
            return ClassificationResult(
                zone=Zone.YELLOW,
                category="Uncategorized",
                confidence=MEDIUM_PURCHASE_CONFIDENCE,
                reasoning="Unknown merchant - review and categorize based on actual need",
            )
        if amount < _LARGE_PURCHASE_LIMIT:
            return ClassificationResult(
                zone=Zone.YELLOW,
                category="Uncategorized",
                confidence=MID_PURCHASE_CONFIDENCE,
                reasoning=f"{fmt_dollars(amount)} purchase - was this planned or impulsive?",
            )
        return ClassificationResult(
            zone=Zone.YELLOW,
            category="Large Purchase",
            confidence=LARGE_PURCHASE_CONFIDENCE,
            reasoning=f"Large {fmt_dollars(amount)} purchase - verify this was a planned expense",
        )

    # Zero, missing, negative or non-finite amount: nothing left to go on.
    return ClassificationResult(
        zone=Zone.YELLOW,
        category="Uncategorized",
        confidence=FALLBACK_CONFIDENCE,
        reasoning="Unknown merchant - drag to the correct zone",
    )


def classify(
    merchant_name: str | None,
    description: str | None,
    amount: Decimal | int | float | None = None,
    *,
    rules: Sequence[CategoryRule] = ALL_RULES,
) -> ClassificationResult:
    """Suggest a zone, category and confidence for one transaction.

    Parameters
    ----------
    merchant_name, description:
        Free text; ``None`` is treated as empty.
    amount:
        Absolute spend amount. ``None`` is treated as zero. Negative values
        are not normalized and fall through to the generic fallback.
    rules:
        Ordered rule table to scan. Defaults to the built-in tables.
    """

    text = _search_text(merchant_name, description)

    result = _match_rules(text, rules)
    if result is None:
        result = _match_keywords(text)
    if result is None:
        result = _classify_by_amount(as_decimal(amount))

    logger.debug(
        "classified %r as %s/%s (confidence=%.2f)",
        text.strip(),
        result.zone,
        result.category,
        result.confidence,
    )
    return result


def classify_many(
    transactions: Iterable[Transaction],
    *,
    rules: Sequence[CategoryRule] = ALL_RULES,
) -> dict[str, ClassificationResult]:
    """Classify each transaction independently, keyed by transaction id."""

    results: dict[str, ClassificationResult] = {}
    for tx in transactions:
        results[tx.id] = classify(tx.merchant_name, tx.description, tx.amount, rules=rules)
    logger.info("classified %d transactions", len(results))
    return results


def get_suggested_zone(merchant_name: str) -> Zone:
    """Quick zone lookup for a bare merchant name."""

    return classify(merchant_name, "", None).zone


def suggest_zone_from_history(
    merchant_name: str | None,
    history: Iterable[HistoryEntry],
) -> Zone | None:
    """Return the user's usual zone for ``merchant_name``, if established.

    Matching is case-insensitive equality on the merchant name (not a
    substring test). With at least two prior categorizations, the most
    frequent zone wins; ties go to the zone encountered first. Returns
    ``None`` otherwise so the caller falls back to :func:`classify`.
    ``UNCATEGORIZED`` entries are not decisions and are ignored.
    """

    if not merchant_name:
        return None
    key = merchant_name.lower()

    counts: Counter[Zone] = Counter()
    for entry in history:
        if entry.zone == Zone.UNCATEGORIZED:
            continue
        if (entry.merchant_name or "").lower() == key:
            counts[Zone(entry.zone)] += 1

    if sum(counts.values()) < HISTORY_MIN_OCCURRENCES:
        return None
    # most_common() keeps insertion order among equal counts.
    zone, _n = counts.most_common(1)[0]
    return zone


def suggest_zone(
    transaction: Transaction,
    history: Iterable[HistoryEntry] = (),
    *,
    rules: Sequence[CategoryRule] = ALL_RULES,
) -> Zone:
    """History first, classifier second: the default zone for drag-and-drop."""

    from_history = suggest_zone_from_history(transaction.merchant_name, history)
    if from_history is not None:
        return from_history
    return classify(
        transaction.merchant_name, transaction.description, transaction.amount, rules=rules
    ).zone


__all__ = [
    "HISTORY_MIN_OCCURRENCES",
    "classify",
    "classify_many",
    "get_suggested_zone",
    "suggest_zone_from_history",
    "suggest_zone",
]
