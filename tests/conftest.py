"""Pytest configuration shared by the test suite.

Makes ``packages/`` importable when running from a checkout without an
editable install, isolates the ``SPENDING_ZONES_*`` environment variables so
a developer's shell or ``.env`` cannot leak into assertions, and provides a
small transaction factory.
"""

from __future__ import annotations

import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
if str(_PKG_DIR) not in sys.path:
    sys.path.insert(0, str(_PKG_DIR))

from spending_zones.models import Categorization, Transaction, Zone  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SPENDING_ZONES_RULES_FILE", "SPENDING_ZONES_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("spending_zones")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def make_tx(
    tx_id: str,
    merchant: str | None,
    amount: str | int,
    *,
    description: str = "",
    category: str | None = None,
    on: date | None = None,
) -> Transaction:
    return Transaction(
        id=tx_id,
        description=description,
        amount=Decimal(str(amount)),
        date=on,
        merchant_name=merchant,
        default_category=category,
    )


def decide(tx_id: str, zone: Zone) -> Categorization:
    return Categorization(transaction_id=tx_id, zone=zone)


@pytest.fixture
def tx_factory():
    return make_tx


@pytest.fixture
def decision_factory():
    return decide
