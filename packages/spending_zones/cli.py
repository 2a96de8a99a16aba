# ruff: noqa: I001
"""CLI for the ``spending_zones`` package.

Exposes callable command handlers (``cmd_classify``, ``cmd_categorize``,
``cmd_insights``, ``cmd_summary``, ``cmd_trends``) and a Typer-based console interface. The
root callback loads a local ``.env`` with ``python-dotenv`` (without
overriding variables already set) and configures logging before any command
runs. Business logic lives in the library modules; handlers only parse
input, call them, and print.
"""

from __future__ import annotations

import csv
import sys
from collections.abc import Sequence
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .config import rules_file_from_env
from .logging_setup import configure_logging, get_logger
from .models import CategoryRule, Categorization, Transaction

logger = get_logger("spending_zones.cli")


# ---- Small module-level helpers used by CLI commands -------------------------


def _load_csv(csv_path: str) -> tuple[list[Transaction], list[Categorization]] | None:
    """Read a transaction CSV, printing a one-line error and returning ``None`` on failure."""

    from .ingest import read_transactions_csv

    try:
        with open(csv_path, encoding="utf-8", newline="") as f:
            return read_transactions_csv(f)
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
    except csv.Error as e:
        print(f"Error: Failed to parse CSV: {e}", file=sys.stderr)
    except ValueError as e:
        print(f"Error: Invalid transaction data: {e}", file=sys.stderr)
    return None


def _resolve_rules(rules_path: str | None) -> Sequence[CategoryRule] | None:
    """Return the configured rule table (``--rules`` > env > built-in).

    Prints an error and returns ``None`` when a configured file is unusable.
    """

    from .rules import ALL_RULES, load_rules_file

    path = rules_path or rules_file_from_env()
    if path is None:
        return ALL_RULES
    try:
        rules = load_rules_file(path)
    except FileNotFoundError:
        print(f"Error: Rules file not found: {path}", file=sys.stderr)
        return None
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None
    logger.info("loaded %d rules from %s", len(rules), path)
    return rules


def _parse_money_option(raw: str | None, name: str) -> tuple[bool, Decimal | None]:
    from .ingest import parse_amount

    if raw is None:
        return True, None
    try:
        return True, parse_amount(raw)
    except ValueError as e:
        print(f"Error: --{name}: {e}", file=sys.stderr)
        return False, None


# ---- Command handlers -------------------------------------------------------


def cmd_classify(
    merchant: str,
    *,
    description: str = "",
    amount: str | None = None,
    rules_path: str | None = None,
) -> int:
    """Classify one merchant/description and print the result block."""

    from .classify import classify

    ok, parsed_amount = _parse_money_option(amount, "amount")
    if not ok:
        return 1
    rules = _resolve_rules(rules_path)
    if rules is None:
        return 1

    result = classify(merchant, description, parsed_amount, rules=rules)
    print(f"zone:       {result.zone}")
    print(f"category:   {result.category}")
    print(f"confidence: {result.confidence:.2f}")
    print(f"reasoning:  {result.reasoning}")
    return 0


def cmd_categorize(csv_path: str, *, rules_path: str | None = None) -> int:
    """Print ``<id>\\t<zone>\\t<category>\\t<confidence>`` for each CSV row."""

    from .classify import classify_many

    loaded = _load_csv(csv_path)
    if loaded is None:
        return 1
    transactions, _decisions = loaded
    rules = _resolve_rules(rules_path)
    if rules is None:
        return 1

    results = classify_many(transactions, rules=rules)
    for tx in transactions:
        r = results[tx.id]
        print(f"{tx.id}\t{r.zone}\t{r.category}\t{r.confidence:.2f}")
    return 0


def cmd_insights(
    csv_path: str,
    *,
    income: str | None = None,
    limit: int | None = None,
    headline: bool = False,
) -> int:
    """Print insights for a CSV whose ``zone`` column holds the user's decisions."""

    from .insights import generate_insights

    ok, monthly_income = _parse_money_option(income, "income")
    if not ok:
        return 1
    loaded = _load_csv(csv_path)
    if loaded is None:
        return 1
    transactions, decisions = loaded

    insights = generate_insights(transactions, decisions, monthly_income)
    if headline:
        insights = insights[:1]
    elif limit is not None:
        insights = insights[:limit]

    if not insights:
        print("No insights for this data.")
        return 0
    for ins in insights:
        line = f"[{ins.priority}] {ins.kind}: {ins.title} - {ins.message}"
        if ins.impact:
            line += f" ({ins.impact})"
        print(line)
    return 0


def cmd_summary(csv_path: str) -> int:
    """Print zone totals, counts and the health score for a categorized CSV."""

    from .summary import health_message, spending_tip, summarize_zones

    loaded = _load_csv(csv_path)
    if loaded is None:
        return 1
    transactions, decisions = loaded

    s = summarize_zones(transactions, decisions)
    print(
        f"transactions:  {s.total_transactions} "
        f"({s.categorized} categorized, {s.uncategorized} uncategorized)"
    )
    print(f"green:         {s.green_amount:.2f}")
    print(f"yellow:        {s.yellow_amount:.2f}")
    print(f"red:           {s.red_amount:.2f}")
    print(f"health score:  {s.health_score} ({health_message(s.health_score)})")
    print(f"tip:           {spending_tip(s)}")
    return 0


def cmd_trends(
    csv_path: str,
    *,
    days: int = 30,
    as_of: str | None = None,
    income: str | None = None,
    top: int = 5,
) -> int:
    """Print zone distribution, top merchants and a monthly projection for a window."""

    from .ingest import parse_date
    from .insights import zone_lookup
    from .money import ZERO, round_whole
    from .trends import (
        filter_window,
        projected_monthly,
        savings_outlook,
        top_merchants,
        zone_distribution,
    )

    try:
        today = parse_date(as_of) if as_of else None
    except ValueError as e:
        print(f"Error: --as-of: {e}", file=sys.stderr)
        return 1
    today = today or date.today()
    ok, monthly_income = _parse_money_option(income, "income")
    if not ok:
        return 1
    loaded = _load_csv(csv_path)
    if loaded is None:
        return 1
    transactions, decisions = loaded

    window = filter_window(transactions, days, today=today)
    zones = zone_lookup(decisions)
    shares = zone_distribution(window, zones)
    spent = sum((s.amount for s in shares), ZERO)

    start = today - timedelta(days=days - 1)
    print(f"window:        {start.isoformat()} to {today.isoformat()} ({len(window)} transactions)")
    for s in shares:
        print(f"{s.label.lower() + ':':<15}{s.amount:.2f}")
    print("top merchants:")
    for m in top_merchants(window, zones, limit=top):
        print(f"  {m.name}\t{m.zone}\t{m.amount:.2f}\t{m.count}")

    projected = projected_monthly(spent, days)
    print(f"projected:     {projected:.2f}/month")
    if monthly_income is not None:
        outlook = savings_outlook(monthly_income, projected)
        print(
            f"savings:       {outlook.monthly_savings:.2f}/month "
            f"({round_whole(outlook.savings_rate):f}%, {outlook.status})"
        )
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Classify transactions into GREEN/YELLOW/RED spending zones and "
        "summarize categorized spending."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer inspects these when used as default values below.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a transaction CSV (id, description, amount[, date, merchant, category, zone, note])",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
    readable=True,
)

RULES_OPTION: OptionInfo = typer.Option(
    ...,  # default comes from the parameter (None)
    "--rules",
    help="JSON rule table overriding the built-in rules (env: SPENDING_ZONES_RULES_FILE).",
    dir_okay=False,
)


@app.command("classify")
def classify_cmd(
    merchant: str,
    *,
    description: str = typer.Option("", help="Free-text transaction description."),
    amount: str | None = typer.Option(None, help="Transaction amount, e.g. 12.50 or $1,200."),
    rules: Annotated[Path | None, RULES_OPTION] = None,
) -> None:
    """Suggest a zone for a single merchant."""

    raise typer.Exit(
        cmd_classify(
            merchant,
            description=description,
            amount=amount,
            rules_path=str(rules) if rules else None,
        )
    )


@app.command("categorize")
def categorize_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    rules: Annotated[Path | None, RULES_OPTION] = None,
) -> None:
    """Suggest a zone for every transaction in a CSV."""

    raise typer.Exit(cmd_categorize(str(csv_path), rules_path=str(rules) if rules else None))


@app.command("insights")
def insights_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    income: str | None = typer.Option(None, help="Monthly take-home income for savings insights."),
    limit: int | None = typer.Option(None, min=1, help="Show at most this many insights."),
    headline: bool = typer.Option(False, help="Show only the single most urgent insight."),
) -> None:
    """Generate prioritized spending insights from categorized transactions."""

    raise typer.Exit(cmd_insights(str(csv_path), income=income, limit=limit, headline=headline))


@app.command("summary")
def summary_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Show zone totals and the spending health score."""

    raise typer.Exit(cmd_summary(str(csv_path)))


@app.command("trends")
def trends_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    days: int = typer.Option(30, min=1, help="Trailing window in days, today included."),
    as_of: str | None = typer.Option(None, help="Window end date (YYYY-MM-DD); defaults to today."),
    income: str | None = typer.Option(None, help="Monthly take-home income for the savings outlook."),
    top: int = typer.Option(5, min=1, help="Number of top merchants to list."),
) -> None:
    """Show where the money went over a recent window of days."""

    raise typer.Exit(
        cmd_trends(str(csv_path), days=days, as_of=as_of, income=income, top=top)
    )


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to SPENDING_ZONES_LOG_LEVEL, then WARNING)."
    ),
) -> None:
    """Root callback: load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    try:
        configure_logging(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    main()
