"""CSV boundary: turn a simple transaction export into core inputs.

The classification core never touches files; this module exists so the CLI
(and scripts) can feed it. Expected header (case-insensitive, any order)::

    id, description, amount [, date, merchant, category, zone, note]

Parsing follows RFC 4180 via the stdlib :mod:`csv` module. Shape problems are
reported here, at the boundary, so the core can stay total.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import IO

from .logging_setup import get_logger
from .models import Categorization, Transaction, Zone, coerce_zone

logger = get_logger("spending_zones.ingest")

REQUIRED_COLUMNS: frozenset[str] = frozenset({"id", "description", "amount"})


def parse_amount(raw: str | None) -> Decimal:
    """Parse a currency string into ``Decimal``.

    Handles a leading sign, ``$``, thousands separators and accounting-style
    parentheses in any combination (``"-($1,234.56)"``). Raises
    ``ValueError`` on empty or malformed input.
    """

    if raw is None:
        raise ValueError("amount is required")
    s = raw.strip()
    if not s:
        raise ValueError("amount is empty")
    negative = False

    # Strip leading sign, currency symbol and surrounding parentheses until stable.
    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("$"):
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "").strip()
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    return -abs(d) if negative else d


def parse_date(raw: str | None) -> date | None:
    """Parse ``YYYY-MM-DD`` (optionally with a time part) or ``MM/DD/YYYY``."""

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    first = s.split()[0].split("T", 1)[0]
    for fmt in ("%Y-%m-%d", "%m/%d/%Y"):
        try:
            return datetime.strptime(first, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid date: {raw!r}")


def _normalize_header(fieldnames: Iterable[str] | None) -> dict[str, str]:
    if fieldnames is None:
        raise csv.Error("CSV appears to have no header row")
    mapping = {name.strip().lower(): name for name in fieldnames if name is not None}
    missing = sorted(REQUIRED_COLUMNS - mapping.keys())
    if missing:
        raise csv.Error("CSV header is missing required columns: " + ", ".join(missing))
    return mapping


def read_transactions_csv(
    stream: IO[str],
) -> tuple[list[Transaction], list[Categorization]]:
    """Read transactions (and any pre-assigned zones) from a CSV stream.

    Rows whose ``zone`` column is blank or ``UNCATEGORIZED`` produce no
    categorization. Amounts are stored as absolute values. Raises
    ``csv.Error`` for header problems and ``ValueError`` (naming the 1-based
    data row) for malformed values.
    """

    reader = csv.DictReader(stream)
    columns = _normalize_header(reader.fieldnames)

    def cell(row: dict[str, str | None], key: str) -> str | None:
        name = columns.get(key)
        if name is None:
            return None
        value = row.get(name)
        return value.strip() if isinstance(value, str) else None

    transactions: list[Transaction] = []
    categorizations: list[Categorization] = []
    for line_no, row in enumerate(reader, start=1):
        try:
            tx_id = cell(row, "id")
            if not tx_id:
                raise ValueError("id is empty")
            tx = Transaction(
                id=tx_id,
                description=cell(row, "description") or "",
                # Absolute spend, whatever sign convention the export uses.
                amount=abs(parse_amount(cell(row, "amount"))),
                date=parse_date(cell(row, "date")),
                merchant_name=cell(row, "merchant") or None,
                default_category=cell(row, "category") or None,
            )
            raw_zone = cell(row, "zone")
            zone = coerce_zone(raw_zone) if raw_zone else Zone.UNCATEGORIZED
        except ValueError as exc:
            raise ValueError(f"row {line_no}: {exc}") from exc

        transactions.append(tx)
        if zone != Zone.UNCATEGORIZED:
            categorizations.append(
                Categorization(transaction_id=tx.id, zone=zone, note=cell(row, "note") or None)
            )

    logger.info(
        "read %d transactions (%d categorized)", len(transactions), len(categorizations)
    )
    return transactions, categorizations


__all__ = ["REQUIRED_COLUMNS", "parse_amount", "parse_date", "read_transactions_csv"]
