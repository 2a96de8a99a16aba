"""Data models and type aliases for ``spending_zones``.

Transactions are read-only inputs owned by the host application. Results
(classifications, insights) are validated pydantic models so invariants such
as ``confidence in [0, 1]`` and ``priority in [1, 10]`` are enforced at
construction time rather than by convention.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Zones
# ---------------------------------------------------------------------------


class Zone(StrEnum):
    """Traffic-light zone assigned to a transaction."""

    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"
    UNCATEGORIZED = "UNCATEGORIZED"


# The classifier only ever produces one of these.
SUBSTANTIVE_ZONES: tuple[Zone, ...] = (Zone.GREEN, Zone.YELLOW, Zone.RED)


def coerce_zone(value: Zone | str) -> Zone:
    """Return ``value`` as a :class:`Zone`, accepting any casing of the name.

    Raises ``ValueError`` for anything outside the closed enumeration.
    """

    if isinstance(value, Zone):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid zone: {value!r}")
    try:
        return Zone(value.strip().upper())
    except ValueError:
        allowed = ", ".join(z.value for z in Zone)
        raise ValueError(f"Invalid zone: {value!r} (allowed: {allowed})") from None


# ---------------------------------------------------------------------------
# Transactions (input, read-only)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single bank transaction as seen by the classification core.

    ``amount`` is a :class:`~decimal.Decimal` in currency units. Callers pass
    absolute values for spending; the core does not normalize the sign.
    ``default_category`` is the label the importing system attached (e.g. the
    aggregator's category or the classifier's suggestion) and feeds the
    per-category aggregates of the insight generator.
    """

    id: str
    description: str
    amount: Decimal
    date: date | None = None
    merchant_name: str | None = None
    default_category: str | None = None

    @property
    def merchant_key(self) -> str:
        """Lowercased merchant name, or description when no merchant is known."""

        return (self.merchant_name or self.description or "").lower()

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> Transaction:
        """Build a transaction from a loosely typed mapping.

        Accepts ``merchant`` or ``merchant_name`` and ``category`` or
        ``default_category`` keys. String amounts are parsed as ``Decimal``
        and ISO ``YYYY-MM-DD`` strings as dates. Raises ``ValueError`` when
        ``id`` is missing or a value cannot be interpreted.
        """

        tx_id = record.get("id")
        if tx_id is None or not str(tx_id).strip():
            raise ValueError("transaction id is required")

        raw_amount = record.get("amount")
        if raw_amount is None or raw_amount == "":
            amount = Decimal("0")
        elif isinstance(raw_amount, Decimal):
            amount = raw_amount
        elif isinstance(raw_amount, float):
            # str() first so 0.1 stays 0.1 rather than its binary expansion.
            amount = Decimal(str(raw_amount))
        else:
            try:
                amount = Decimal(str(raw_amount).strip())
            except ArithmeticError as exc:
                raise ValueError(f"invalid amount: {raw_amount!r}") from exc

        raw_date = record.get("date")
        tx_date: date | None
        if raw_date is None or raw_date == "":
            tx_date = None
        elif isinstance(raw_date, datetime):
            tx_date = raw_date.date()
        elif isinstance(raw_date, date):
            tx_date = raw_date
        else:
            try:
                tx_date = date.fromisoformat(str(raw_date).strip()[:10])
            except ValueError as exc:
                raise ValueError(f"invalid date: {raw_date!r}") from exc

        merchant = record.get("merchant_name", record.get("merchant"))
        category = record.get("default_category", record.get("category"))
        return cls(
            id=str(tx_id).strip(),
            description=str(record.get("description") or ""),
            amount=amount,
            date=tx_date,
            merchant_name=str(merchant) if merchant else None,
            default_category=str(category) if category else None,
        )


type Transactions = Iterable[Transaction]
"""A generic iterable of transactions supplied by the host application."""


# ---------------------------------------------------------------------------
# Rules and classification results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategoryRule:
    """Lowercase substring patterns implying a zone and category label."""

    patterns: tuple[str, ...]
    zone: Zone
    category: str

    def __post_init__(self) -> None:
        if self.zone not in SUBSTANTIVE_ZONES:
            raise ValueError(f"CategoryRule.zone must be GREEN/YELLOW/RED, got {self.zone!r}")
        if not self.patterns:
            raise ValueError(f"CategoryRule {self.category!r} requires at least one pattern")
        # Frozen dataclass: bypass __setattr__ to store the normalized form.
        object.__setattr__(self, "patterns", tuple(p.lower() for p in self.patterns))


class ClassificationResult(BaseModel):
    """Suggested zone for one transaction.

    ``confidence`` is a hand-tuned constant per rule tier, a UI-facing
    certainty signal rather than a calibrated probability.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    zone: Zone
    category: str
    confidence: float
    reasoning: str

    @field_validator("zone")
    @classmethod
    def _zone_is_substantive(cls, v: Zone) -> Zone:
        if v not in SUBSTANTIVE_ZONES:
            raise ValueError("classification zone must be GREEN, YELLOW or RED")
        return v

    @field_validator("confidence")
    @classmethod
    def _confidence_in_unit_interval(cls, v: float) -> float:
        fv = float(v)
        if 0.0 <= fv <= 1.0:
            return fv
        raise ValueError("confidence must be within [0,1]")

    @field_validator("reasoning")
    @classmethod
    def _reasoning_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reasoning must be non-empty")
        return v


# ---------------------------------------------------------------------------
# User decisions
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Categorization:
    """A user-asserted zone for one transaction.

    Mutable on purpose: re-categorizing the same transaction updates the
    existing record in place (see :class:`~spending_zones.categorizations.CategorizationBook`).
    """

    transaction_id: str
    zone: Zone
    note: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


class HistoryEntry(NamedTuple):
    """A prior categorization of a merchant, used for history-based suggestions."""

    merchant_name: str
    zone: Zone


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

type InsightKind = Literal["warning", "tip", "win", "action"]


class SpendingInsight(BaseModel):
    """A derived observation about spending behavior.

    Recomputed on demand from the current transaction/categorization snapshot;
    never persisted. Higher ``priority`` sorts first for display.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: Literal["warning", "tip", "win", "action"]
    title: str
    message: str
    impact: str | None = None
    priority: int

    @field_validator("priority")
    @classmethod
    def _priority_in_range(cls, v: int) -> int:
        if 1 <= v <= 10:
            return v
        raise ValueError("priority must be within [1,10]")

    @field_validator("title", "message")
    @classmethod
    def _text_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title and message must be non-empty")
        return v


__all__ = [
    "Zone",
    "SUBSTANTIVE_ZONES",
    "coerce_zone",
    "Transaction",
    "Transactions",
    "CategoryRule",
    "ClassificationResult",
    "Categorization",
    "HistoryEntry",
    "InsightKind",
    "SpendingInsight",
]
