from __future__ import annotations
import math
from datetime import date
from typing import Iterable, List, Mapping

from finance_engine.analytics.monthly_aggregates import category_totals
from finance_engine.core.dates import days_elapsed_in_month, days_in_month, parse_period_key
from finance_engine.core.models import BudgetState, BudgetStatus, MonthKey, Transaction, TxType
from finance_engine.normalize import positive_limit

DEFAULT_WARN_PCT = 80.0


def _check_days(days_elapsed: int, total_days: int) -> None:
    for name, v in (("days_elapsed", days_elapsed), ("total_days", total_days)):
        if isinstance(v, bool) or not isinstance(v, int):
            raise TypeError(f"{name} must be an int, got {type(v).__name__}")
    if total_days < 1:
        raise ValueError(f"total_days must be >= 1, got {total_days}")
    if not 0 <= days_elapsed <= total_days:
        raise ValueError(f"days_elapsed must be within 0..{total_days}, got {days_elapsed}")


def budget_state(remaining: float) -> BudgetState:
    if remaining == 0:
        return BudgetState.MET
    if remaining < 0:
        return BudgetState.OVER
    return BudgetState.UNDER


def budget_level(utilization_pct: float, warn_pct: float = DEFAULT_WARN_PCT) -> str:
    if utilization_pct >= 100.0:
        return "exceeded"
    if utilization_pct >= warn_pct:
        return "warning"
    return "ok"


def track_budget(
    month_budgets: Mapping[str, float],
    actual_spend: Mapping[str, float],
    days_elapsed: int,
    total_days: int,
    warn_pct: float = DEFAULT_WARN_PCT,
) -> List[BudgetStatus]:
    """Budget vs actual per budgeted category, with a straight-line month-end projection.

    Entries with a non-positive or non-numeric limit are skipped. Spend in
    categories without a budget is not reported here.
    """
    _check_days(days_elapsed, total_days)

    out: List[BudgetStatus] = []
    for category, raw_limit in month_budgets.items():
        limit = positive_limit(raw_limit)
        if limit is None:
            continue
        spent = float(actual_spend.get(category, 0.0))
        if not math.isfinite(spent):
            raise ValueError(f"spend for {category!r} is not finite: {spent!r}")
        remaining = limit - spent
        # a future month (nothing elapsed) projects 0 rather than extrapolating
        daily_rate = spent / days_elapsed if days_elapsed > 0 else 0.0
        pct = spent / limit * 100.0
        out.append(BudgetStatus(
            category=category,
            limit=limit,
            spent=spent,
            remaining=remaining,
            state=budget_state(remaining),
            daily_rate=daily_rate,
            projected_end_of_month=daily_rate * total_days,
            utilization_pct=pct,
            level=budget_level(pct, warn_pct),
        ))
    return out


def month_budget_status(
    transactions: Iterable[Transaction],
    budgets: Mapping[str, Mapping[str, float]],
    month: MonthKey,
    today: date,
    warn_pct: float = DEFAULT_WARN_PCT,
) -> List[BudgetStatus]:
    """track_budget for one month of a sanitized {month: {category: limit}} map."""
    y, m = parse_period_key(month)
    if m is None:
        raise ValueError(f"expected a month key, got {month!r}")
    spend = category_totals(transactions, TxType.EXPENSE, period=month)
    return track_budget(
        budgets.get(month, {}),
        spend,
        days_elapsed=days_elapsed_in_month(month, today),
        total_days=days_in_month(y, m),
        warn_pct=warn_pct,
    )
