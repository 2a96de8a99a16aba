from datetime import date
from decimal import Decimal

import pytest

from spending_zones.insights import zone_lookup
from spending_zones.models import Zone
from spending_zones.summary import (
    calculate_health_score,
    health_greeting,
    health_message,
    spending_tip,
    summarize_zones,
)
from spending_zones.trends import (
    daily_totals,
    filter_window,
    projected_monthly,
    savings_outlook,
    top_merchants,
    weekly_pattern,
    zone_distribution,
)

D = Decimal
SUNDAY = date(2024, 3, 10)


class TestHealthScore:
    @pytest.mark.parametrize(
        ("green", "yellow", "red", "expected"),
        [
            ("100", "0", "0", 100),
            ("0", "100", "0", 50),
            ("0", "0", "100", 0),
            ("50", "50", "0", 75),
            ("1", "1", "1", 50),
            ("0", "0", "0", 100),
        ],
    )
    def test_formula(self, green, yellow, red, expected):
        assert calculate_health_score(D(green), D(yellow), D(red)) == expected

    @pytest.mark.parametrize(
        ("score", "greeting", "message"),
        [
            (80, "Looking good.", "Strong financial discipline"),
            (79, "Room for improvement.", "Good, but reduce Yellow/Red"),
            (40, "Your wallet is concerned.", "Too much discretionary spending"),
            (39, "Time for tough love.", "Red zone needs attention"),
        ],
    )
    def test_tiers(self, score, greeting, message):
        assert health_greeting(score) == greeting
        assert health_message(score) == message


def test_summarize_zones(tx_factory, decision_factory):
    txs = [
        tx_factory("1", "Rent Co", "1000"),
        tx_factory("2", "Cinema", "200"),
        tx_factory("3", "Casino", "100"),
        tx_factory("4", "Mystery", "50"),
    ]
    decisions = [
        decision_factory("1", Zone.GREEN),
        decision_factory("2", Zone.YELLOW),
        decision_factory("3", Zone.RED),
    ]
    summary = summarize_zones(txs, decisions)
    assert (summary.total_transactions, summary.categorized, summary.uncategorized) == (4, 3, 1)
    assert summary.total_amount == D("1300")
    # (1000 + 100) / 1300 = 84.6
    assert summary.health_score == 85


class TestSpendingTip:
    def _summary(self, tx_factory, decision_factory, g, y, r):
        txs = [tx_factory("g", "A", g), tx_factory("y", "B", y), tx_factory("r", "C", r)]
        decisions = [
            decision_factory("g", Zone.GREEN),
            decision_factory("y", Zone.YELLOW),
            decision_factory("r", Zone.RED),
        ]
        return summarize_zones(txs, decisions)

    def test_red_heavy(self, tx_factory, decision_factory):
        tip = spending_tip(self._summary(tx_factory, decision_factory, "50", "20", "30"))
        assert tip.startswith("30% Red zone.")

    def test_yellow_heavy(self, tx_factory, decision_factory):
        tip = spending_tip(self._summary(tx_factory, decision_factory, "50", "45", "5"))
        assert tip.startswith("Heavy Yellow spending.")

    def test_default(self, tx_factory, decision_factory):
        tip = spending_tip(self._summary(tx_factory, decision_factory, "80", "15", "5"))
        assert tip.startswith("Keep categorizing honestly.")


class TestTrends:
    @pytest.fixture
    def dated(self, tx_factory):
        return [
            tx_factory("old", "Target", "99", on=date(2024, 3, 3)),
            tx_factory("start", "Target", "-20", on=date(2024, 3, 4)),
            tx_factory("sun", "Shell", "40", on=SUNDAY),
            tx_factory("sat", None, "15", on=date(2024, 3, 9)),
            tx_factory("future", "Shell", "5", on=date(2024, 3, 11)),
            tx_factory("undated", "Shell", "5"),
        ]

    @pytest.fixture
    def zones(self, decision_factory):
        return zone_lookup(
            [
                decision_factory("start", Zone.YELLOW),
                decision_factory("sun", Zone.GREEN),
                decision_factory("sat", Zone.RED),
                decision_factory("future", Zone.UNCATEGORIZED),
            ]
        )

    def test_filter_window_includes_today_and_cutoff(self, dated):
        kept = filter_window(dated, 7, today=SUNDAY)
        assert [tx.id for tx in kept] == ["start", "sun", "sat"]

    def test_filter_window_rejects_non_positive_days(self, dated):
        with pytest.raises(ValueError):
            filter_window(dated, 0, today=SUNDAY)

    def test_zone_distribution_uses_absolute_amounts(self, dated, zones):
        shares = zone_distribution(filter_window(dated, 7, today=SUNDAY), zones)
        assert [(s.zone, s.label, s.amount) for s in shares] == [
            (Zone.GREEN, "Essentials", D("40")),
            (Zone.YELLOW, "Discretionary", D("20")),
            (Zone.RED, "Avoidable", D("15")),
        ]

    def test_top_merchants(self, dated, zones):
        top = top_merchants(dated, zones, limit=2)
        assert [(m.name, m.amount, m.count) for m in top] == [
            ("Target", D("119"), 2),
            ("Shell", D("50"), 3),
        ]
        # Zone of the first transaction seen for the merchant
        assert top[0].zone == Zone.UNCATEGORIZED
        assert top[1].zone == Zone.GREEN
        assert top_merchants(dated, zones)[-1].name == "Unknown"

    def test_weekly_pattern_is_sunday_first_and_skips_uncategorized(self, dated, zones):
        buckets = weekly_pattern(dated, zones)
        assert [b.label for b in buckets][:2] == ["Sun", "Mon"]
        assert buckets[0].totals[Zone.GREEN] == D("40")
        assert buckets[1].total == D("20")
        assert buckets[6].totals[Zone.RED] == D("15")
        assert sum(b.total for b in buckets) == D("75")

    def test_daily_totals(self, dated, zones):
        buckets = daily_totals(dated, zones, days=3, today=SUNDAY)
        assert [b.label for b in buckets] == ["2024-03-08", "2024-03-09", "2024-03-10"]
        assert [b.total for b in buckets] == [D("0"), D("15"), D("40")]

    def test_projected_monthly(self):
        assert projected_monthly(D("70"), 7) == D("300")
        assert projected_monthly(D("70"), 0) == D("0")

    @pytest.mark.parametrize(
        ("spending", "status"),
        [("750", "Excellent"), ("850", "Good"), ("1000", "Thin margins"), ("1100", "Over budget")],
    )
    def test_savings_outlook(self, spending, status):
        outlook = savings_outlook(D("1000"), D(spending))
        assert outlook.status == status
        assert outlook.monthly_savings == D("1000") - D(spending)

    def test_savings_outlook_without_income(self):
        outlook = savings_outlook(D("0"), D("100"))
        assert outlook.savings_rate == 0
        assert outlook.status == "Thin margins"
