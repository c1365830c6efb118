"""Transaction analytics engine for a personal finance tracker."""

from finance_engine.analytics.forecast import forecast, savings_forecast
from finance_engine.analytics.monthly_aggregates import aggregate, category_totals, monthly_series
from finance_engine.analytics.outliers import detect_anomalies
from finance_engine.analytics.waterfall import monthly_waterfall
from finance_engine.analytics.yoy import compare, compare_years, contributions
from finance_engine.budgeting.tracker import track_budget
from finance_engine.core.dates import is_period_in_past
from finance_engine.normalize import normalize_transactions, sanitize_budgets

__version__ = "0.1.0"

__all__ = [
    "aggregate",
    "category_totals",
    "compare",
    "compare_years",
    "contributions",
    "detect_anomalies",
    "forecast",
    "is_period_in_past",
    "monthly_series",
    "monthly_waterfall",
    "normalize_transactions",
    "sanitize_budgets",
    "savings_forecast",
    "track_budget",
]
