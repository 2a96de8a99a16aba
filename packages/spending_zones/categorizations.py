"""In-memory bookkeeping for user zone decisions.

The host application owns persistence; :class:`CategorizationBook` mirrors
the contract it enforces so the core can be exercised end to end: at most one
categorization per transaction, created on first decision and updated in
place on every later one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import replace
from datetime import datetime

from .logging_setup import get_logger
from .models import Categorization, ClassificationResult, HistoryEntry, Transaction, Zone, coerce_zone

logger = get_logger("spending_zones.categorizations")


class CategorizationBook:
    """Transaction id -> :class:`Categorization` with upsert semantics."""

    def __init__(self, categorizations: Iterable[Categorization] = ()) -> None:
        """Seed from stored records, keeping their timestamps (last record per id wins)."""

        self._by_id: dict[str, Categorization] = {}
        for c in categorizations:
            if not c.transaction_id or not str(c.transaction_id).strip():
                raise ValueError("transaction_id is required")
            self._by_id[c.transaction_id] = replace(c, zone=coerce_zone(c.zone))

    def categorize(
        self,
        transaction_id: str,
        zone: Zone | str,
        note: str | None = None,
        *,
        now: datetime | None = None,
    ) -> Categorization:
        """Create or overwrite the decision for ``transaction_id``.

        Raises ``ValueError`` for a blank id or a zone outside the closed
        enumeration. Re-categorizing keeps ``created_at`` and bumps
        ``updated_at``.
        """

        if not transaction_id or not str(transaction_id).strip():
            raise ValueError("transaction_id is required")
        resolved = coerce_zone(zone)
        stamp = now or datetime.now()
        clean_note = note.strip() if note and note.strip() else None

        existing = self._by_id.get(transaction_id)
        if existing is None:
            record = Categorization(
                transaction_id=transaction_id,
                zone=resolved,
                note=clean_note,
                created_at=stamp,
                updated_at=stamp,
            )
            self._by_id[transaction_id] = record
            return record

        existing.zone = resolved
        existing.note = clean_note
        existing.updated_at = stamp
        return existing

    def get(self, transaction_id: str) -> Categorization | None:
        return self._by_id.get(transaction_id)

    def zone_for(self, transaction_id: str) -> Zone:
        record = self._by_id.get(transaction_id)
        return record.zone if record else Zone.UNCATEGORIZED

    def values(self) -> list[Categorization]:
        return list(self._by_id.values())

    def __contains__(self, transaction_id: object) -> bool:
        return transaction_id in self._by_id

    def __iter__(self) -> Iterator[Categorization]:
        return iter(list(self._by_id.values()))

    def __len__(self) -> int:
        return len(self._by_id)


def apply_suggestions(
    book: CategorizationBook,
    results: Mapping[str, ClassificationResult],
    *,
    min_confidence: float = 0.0,
    overwrite: bool = False,
) -> int:
    """Record classifier suggestions as decisions (the "auto-categorize" action).

    Only transactions without a substantive decision are touched unless
    ``overwrite`` is set. Suggestions below ``min_confidence`` are skipped.
    Returns the number of decisions written.
    """

    applied = 0
    for tx_id, result in results.items():
        if result.confidence < min_confidence:
            continue
        if not overwrite and book.zone_for(tx_id) != Zone.UNCATEGORIZED:
            continue
        book.categorize(tx_id, result.zone)
        applied += 1
    logger.info("auto-categorized %d of %d transactions", applied, len(results))
    return applied


def merchant_history(
    transactions: Iterable[Transaction],
    categorizations: Iterable[Categorization],
) -> list[HistoryEntry]:
    """Join decisions to merchant names for history-based suggestions.

    Transactions without a merchant name or without a decision are skipped.
    Order follows ``transactions``.
    """

    zone_by_id = {c.transaction_id: coerce_zone(c.zone) for c in categorizations}
    out: list[HistoryEntry] = []
    for tx in transactions:
        zone = zone_by_id.get(tx.id)
        if zone is None or zone == Zone.UNCATEGORIZED or not tx.merchant_name:
            continue
        out.append(HistoryEntry(merchant_name=tx.merchant_name, zone=zone))
    return out


__all__ = ["CategorizationBook", "apply_suggestions", "merchant_history"]
