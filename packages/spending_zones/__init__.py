"""Public interface for the ``spending_zones`` package.

Re-exports the classification engine, the insight generator, trend views and the public
models/types as the stable import surface. There is no runtime logic here,
only symbol re-exports.
"""

from .categorizations import CategorizationBook, apply_suggestions, merchant_history
from .classify import (
    classify,
    classify_many,
    get_suggested_zone,
    suggest_zone,
    suggest_zone_from_history,
)
from .config import DEFAULT_THRESHOLDS, InsightThresholds
from .insights import build_snapshot, generate_insights, get_headline_insight
from .models import (
    Categorization,
    CategoryRule,
    ClassificationResult,
    HistoryEntry,
    SpendingInsight,
    Transaction,
    Transactions,
    Zone,
)
from .rules import ALL_RULES, get_category_rules, load_rules, load_rules_file
from .summary import ZoneSummary, calculate_health_score, summarize_zones
from .trends import (
    SavingsOutlook,
    filter_window,
    projected_monthly,
    savings_outlook,
    top_merchants,
    zone_distribution,
)

__all__ = [
    # Classification
    "classify",
    "classify_many",
    "get_suggested_zone",
    "suggest_zone",
    "suggest_zone_from_history",
    "ALL_RULES",
    "get_category_rules",
    "load_rules",
    "load_rules_file",
    # Insights / dashboard
    "generate_insights",
    "get_headline_insight",
    "build_snapshot",
    "InsightThresholds",
    "DEFAULT_THRESHOLDS",
    "ZoneSummary",
    "calculate_health_score",
    "summarize_zones",
    # Trends
    "filter_window",
    "zone_distribution",
    "top_merchants",
    "projected_monthly",
    "savings_outlook",
    "SavingsOutlook",
    # User decisions
    "CategorizationBook",
    "apply_suggestions",
    "merchant_history",
    # Models / types
    "Zone",
    "Transaction",
    "Transactions",
    "CategoryRule",
    "ClassificationResult",
    "Categorization",
    "HistoryEntry",
    "SpendingInsight",
]
