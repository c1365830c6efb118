from __future__ import annotations
from typing import Iterable, List, Tuple

from finance_engine.analytics.monthly_aggregates import aggregate
from finance_engine.core.dates import year_range
from finance_engine.core.models import (
    AggregateBucket,
    Granularity,
    MonthlyWaterfall,
    Transaction,
    WaterfallStep,
)


def waterfall_steps(bucket: AggregateBucket) -> Tuple[WaterfallStep, ...]:
    """Income rises from 0, expenses fall from there, savings is the closing total."""
    return (
        WaterfallStep(label="Income", start=0.0, end=bucket.income),
        WaterfallStep(label="Expenses", start=bucket.income, end=bucket.savings),
        WaterfallStep(label="Savings", start=0.0, end=bucket.savings, is_total=True),
    )


def monthly_waterfall(transactions: Iterable[Transaction], year: int) -> List[MonthlyWaterfall]:
    buckets = aggregate(transactions, Granularity.MONTH, date_range=year_range(year))
    out: List[MonthlyWaterfall] = []
    for m in range(1, 13):
        key = f"{year:04d}-{m:02d}"
        b = buckets.get(key) or AggregateBucket(period_key=key)
        out.append(MonthlyWaterfall(
            period_key=key,
            income=b.income,
            expenses=b.expenses,
            savings=b.savings,
            steps=waterfall_steps(b),
        ))
    return out
