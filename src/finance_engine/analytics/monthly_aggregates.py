from __future__ import annotations
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from finance_engine.core.dates import as_granularity, period_key, period_range, range_bounds
from finance_engine.core.models import (
    AggregateBucket,
    DateRange,
    Granularity,
    PeriodTotals,
    Transaction,
    TxType,
)


def _as_tx_type(tx_type) -> TxType:
    if isinstance(tx_type, TxType):
        return tx_type
    try:
        return TxType(str(tx_type).lower())
    except ValueError:
        raise ValueError(f"tx_type must be 'income' or 'expense', got {tx_type!r}") from None


def filter_transactions(
    transactions: Iterable[Transaction],
    date_range: Optional[DateRange] = None,
    category: Optional[str] = None,
) -> List[Transaction]:
    """Inclusive date range and exact category match; None means no filter."""
    bounds = range_bounds(date_range) if date_range is not None else None
    out = []
    for t in transactions:
        if bounds is not None and not (bounds[0] <= t.date <= bounds[1]):
            continue
        if category is not None and t.category != category:
            continue
        out.append(t)
    return out


def aggregate(
    transactions: Iterable[Transaction],
    granularity=Granularity.MONTH,
    date_range: Optional[DateRange] = None,
    category: Optional[str] = None,
) -> Dict[str, AggregateBucket]:
    """Return {period_key: AggregateBucket} ordered by key; empty periods omitted."""
    gran = as_granularity(granularity)
    parts: Dict[str, Tuple[List[float], List[float]]] = defaultdict(lambda: ([], []))
    for t in filter_transactions(transactions, date_range, category):
        income, expenses = parts[period_key(t.date, gran)]
        (income if t.is_income else expenses).append(t.amount)

    # exact sums
    return {
        k: AggregateBucket(
            period_key=k,
            income=math.fsum(inc),
            expenses=math.fsum(exp),
            count=len(inc) + len(exp),
        )
        for k, (inc, exp) in sorted(parts.items())
    }


def category_totals(
    transactions: Iterable[Transaction],
    tx_type=TxType.EXPENSE,
    date_range: Optional[DateRange] = None,
    period: Optional[str] = None,
) -> Dict[str, float]:
    """Per-category sums, largest first. `period` is a YYYY or YYYY-MM key."""
    kind = _as_tx_type(tx_type)
    if period is not None:
        if date_range is not None:
            raise ValueError("pass either date_range or period, not both")
        date_range = period_range(period)
    parts: Dict[str, List[float]] = defaultdict(list)
    for t in filter_transactions(transactions, date_range):
        if t.type is kind:
            parts[t.category].append(t.amount)
    totals = {c: math.fsum(v) for c, v in parts.items()}
    return dict(sorted(totals.items(), key=lambda kv: (-kv[1], kv[0])))


def monthly_series(
    transactions: Iterable[Transaction],
    year: int,
    tx_type=TxType.EXPENSE,
    category: Optional[str] = None,
) -> List[float]:
    """Twelve monthly sums for `year` (index 0 = January), zero-filled."""
    kind = _as_tx_type(tx_type)
    slots: List[List[float]] = [[] for _ in range(12)]
    for t in transactions:
        if t.date.year != year or t.type is not kind:
            continue
        if category is not None and t.category != category:
            continue
        slots[t.date.month - 1].append(t.amount)
    return [math.fsum(s) for s in slots]


def period_totals(
    transactions: Iterable[Transaction],
    date_range: Optional[DateRange] = None,
) -> PeriodTotals:
    income: List[float] = []
    expenses: List[float] = []
    for t in filter_transactions(transactions, date_range):
        (income if t.is_income else expenses).append(t.amount)
    return PeriodTotals(
        income=math.fsum(income),
        expenses=math.fsum(expenses),
        count=len(income) + len(expenses),
    )
