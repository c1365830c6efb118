from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from finance_engine.analytics.forecast import savings_forecast
from finance_engine.analytics.monthly_aggregates import aggregate, category_totals, period_totals
from finance_engine.analytics.outliers import detect_anomalies
from finance_engine.analytics.waterfall import monthly_waterfall
from finance_engine.analytics.yoy import compare_periods, compare_years, contributions
from finance_engine.budgeting.tracker import month_budget_status
from finance_engine.core.dates import is_period_in_past, month_key, year_range
from finance_engine.core.models import (
  AggregateBucket,
  AnomalyFlag,
  BudgetStatus,
  Contribution,
  EngineCfg,
  ForecastView,
  Granularity,
  MonthlyWaterfall,
  PeriodTotals,
  Transaction,
  TxType,
  YearComparisonRow,
  YoYResult,
)
from finance_engine.logging_setup import get_logger
from finance_engine.normalize import normalize_with_report, sanitize_budgets

_logger = get_logger("finance_engine.pipeline")


@dataclass(frozen=True)
class Dashboard:
  today: date
  year: int
  transactions: List[Transaction]
  dropped: int
  summary: PeriodTotals
  monthly: Dict[str, AggregateBucket]
  yearly: Dict[str, AggregateBucket]
  years: List[YearComparisonRow]
  month_comparison: Tuple[str, str, YoYResult]
  expense_drivers: List[Contribution]     # selected year vs the year before
  category_spend: Dict[str, float]        # selected year
  forecast: ForecastView
  anomalies: List[AnomalyFlag]
  waterfall: List[MonthlyWaterfall]
  budget_month: str
  budget_locked: bool
  budgets: List[BudgetStatus]


def run_pipeline(
  raw_transactions: Any,
  raw_budgets: Any,
  cfg: EngineCfg,
  today: date,
  year: Optional[int] = None,
  budget_month: Optional[str] = None,
) -> Dashboard:
  """Compute every view from one snapshot so all totals agree with each other."""
  if isinstance(today, datetime):
    today = today.date()
  report = normalize_with_report(
    raw_transactions,
    default_category=cfg.default_category,
    fill_missing_dates=cfg.fill_missing_dates,
  )
  if report.dropped:
    _logger.warning("Dropped %d unusable transaction record(s)", report.dropped)
  txs = report.transactions
  budgets = sanitize_budgets(raw_budgets)

  year = today.year if year is None else year
  sel = year_range(year)
  prev = year_range(year - 1)
  drivers = contributions(
    category_totals(txs, TxType.EXPENSE, date_range=sel),
    category_totals(txs, TxType.EXPENSE, date_range=prev),
  )

  budget_month = budget_month or month_key(today)
  dash = Dashboard(
    today=today,
    year=year,
    transactions=txs,
    dropped=report.dropped,
    summary=period_totals(txs),
    monthly=aggregate(txs, Granularity.MONTH),
    yearly=aggregate(txs, Granularity.YEAR),
    years=compare_years(txs),
    month_comparison=compare_periods(txs, today, Granularity.MONTH),
    expense_drivers=drivers,
    category_spend=category_totals(txs, TxType.EXPENSE, date_range=sel),
    forecast=savings_forecast(txs, cfg.forecast_horizon, cfg.forecast_granularity),
    anomalies=detect_anomalies(txs, year, cfg.z_threshold, cfg.min_anomaly_months),
    waterfall=monthly_waterfall(txs, year),
    budget_month=budget_month,
    budget_locked=is_period_in_past(budget_month, today),
    budgets=month_budget_status(txs, budgets, budget_month, today, cfg.budget_warn_pct),
  )
  _logger.info(
    "Computed dashboard for %d: %d transactions, %d anomalies, %d budgets",
    year, len(txs), len(dash.anomalies), len(dash.budgets),
  )
  return dash
