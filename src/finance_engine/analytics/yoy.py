from __future__ import annotations
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from finance_engine.analytics.monthly_aggregates import aggregate
from finance_engine.core.dates import (
    as_granularity,
    period_key,
    period_range,
    previous_period_key,
)
from finance_engine.core.models import (
    AggregateBucket,
    Contribution,
    Granularity,
    Transaction,
    YearComparisonRow,
    YoYResult,
)


def pct_change(current: float, baseline: float) -> Optional[float]:
    """Percent change vs baseline; None when the baseline is exactly zero."""
    if baseline == 0:
        return None
    return (current - baseline) / abs(baseline) * 100.0


def compare(current: AggregateBucket, baseline: Optional[AggregateBucket]) -> YoYResult:
    if baseline is None:
        # "no baseline" is not the same thing as 0% change
        return YoYResult(
            current=current,
            baseline=None,
            income_delta=None,
            expenses_delta=None,
            savings_delta=None,
            income_pct=None,
            expenses_pct=None,
            savings_pct=None,
        )
    return YoYResult(
        current=current,
        baseline=baseline,
        income_delta=current.income - baseline.income,
        expenses_delta=current.expenses - baseline.expenses,
        savings_delta=current.savings - baseline.savings,
        income_pct=pct_change(current.income, baseline.income),
        expenses_pct=pct_change(current.expenses, baseline.expenses),
        savings_pct=pct_change(current.savings, baseline.savings),
    )


def contributions(
    current_totals: Mapping[str, float],
    baseline_totals: Mapping[str, float],
) -> List[Contribution]:
    """Which categories drove the change, biggest absolute move first."""
    out: List[Contribution] = []
    for cat in set(current_totals) | set(baseline_totals):
        cur = float(current_totals.get(cat, 0.0))
        base = float(baseline_totals.get(cat, 0.0))
        delta = cur - base
        if delta == 0:
            continue
        out.append(Contribution(category=cat, delta=delta, current=cur, baseline=base))
    out.sort(key=lambda c: (-abs(c.delta), c.category))
    return out


def compare_years(transactions: Iterable[Transaction]) -> List[YearComparisonRow]:
    """One row per year with data, each against the calendar year before it."""
    yearly = aggregate(transactions, Granularity.YEAR)
    rows: List[YearComparisonRow] = []
    for key, bucket in yearly.items():
        baseline = yearly.get(previous_period_key(key))
        rows.append(YearComparisonRow(year=key, bucket=bucket, yoy=compare(bucket, baseline)))
    return rows


def compare_periods(
    transactions: Iterable[Transaction],
    reference: date,
    granularity=Granularity.MONTH,
) -> Tuple[str, str, YoYResult]:
    """Period containing `reference` vs the one right before it.

    Returns (current_key, baseline_key, result). The current bucket is
    zero-filled when empty; a baseline with no data gives None deltas.
    """
    gran = as_granularity(granularity)
    txs = list(transactions)
    cur_key = period_key(reference, gran)
    base_key = previous_period_key(cur_key)

    def _bucket(key: str) -> Optional[AggregateBucket]:
        buckets: Dict[str, AggregateBucket] = aggregate(txs, gran, date_range=period_range(key))
        return buckets.get(key)

    current = _bucket(cur_key) or AggregateBucket(period_key=cur_key)
    return cur_key, base_key, compare(current, _bucket(base_key))
