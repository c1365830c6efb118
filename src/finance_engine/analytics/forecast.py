"""Linear savings forecast.

The band around each projected point is +/- the population standard
deviation of the *input* series. It has constant width and ignores the
regression residuals, so it is a rough spread indicator rather than a
statistical prediction interval.
"""
from __future__ import annotations
import math
from numbers import Real
from typing import Iterable, List, Sequence

from finance_engine.analytics.monthly_aggregates import aggregate
from finance_engine.analytics.periods import contiguous_keys, periods_present
from finance_engine.core.dates import as_granularity, shift_period_key
from finance_engine.core.models import (
    Band,
    ForecastPoint,
    ForecastResult,
    ForecastView,
    Granularity,
    Transaction,
)

DEFAULT_HORIZON = 3


def _check_series(series: Iterable[float]) -> List[float]:
    values: List[float] = []
    for i, v in enumerate(series):
        if isinstance(v, bool) or not isinstance(v, Real):
            raise TypeError(f"series[{i}] must be a real number, got {type(v).__name__}")
        if not math.isfinite(v):
            raise ValueError(f"series[{i}] is not finite: {v!r}")
        values.append(float(v))
    return values


def _check_horizon(horizon: int) -> int:
    if isinstance(horizon, bool) or not isinstance(horizon, int):
        raise TypeError(f"horizon must be an int, got {type(horizon).__name__}")
    if horizon < 0:
        raise ValueError(f"horizon must be >= 0, got {horizon}")
    return horizon


def population_std(xs: Sequence[float]) -> float:
    n = len(xs)
    if n == 0:
        return 0.0
    mean = math.fsum(xs) / n
    return math.sqrt(math.fsum((x - mean) ** 2 for x in xs) / n)


def fit_line(ys: Sequence[float]) -> tuple[float, float]:
    """OLS over (index, value); returns (slope, intercept)."""
    n = len(ys)
    xs = range(n)
    sx = math.fsum(xs)
    sy = math.fsum(ys)
    sxy = math.fsum(x * y for x, y in zip(xs, ys))
    sxx = math.fsum(x * x for x in xs)
    denom = n * sxx - sx * sx
    if denom == 0:
        # n <= 1: flat line through the only value (or zero)
        return 0.0, (ys[0] if n == 1 else 0.0)
    slope = (n * sxy - sx * sy) / denom
    intercept = (sy - slope * sx) / n
    return slope, intercept


def forecast(series: Iterable[float], horizon: int = DEFAULT_HORIZON) -> ForecastResult:
    ys = _check_series(series)
    horizon = _check_horizon(horizon)

    slope, intercept = fit_line(ys)
    sigma = population_std(ys)
    n = len(ys)
    points = tuple(slope * (n + i) + intercept for i in range(horizon))
    band = tuple(Band(lower=p - sigma, upper=p + sigma) for p in points)
    return ForecastResult(slope=slope, intercept=intercept, sigma=sigma, points=points, band=band)


def savings_series(
    transactions: Iterable[Transaction],
    granularity=Granularity.MONTH,
) -> List[tuple[str, float]]:
    """Net savings per period from the first to the last populated one, gaps as 0."""
    txs = list(transactions)
    present = periods_present(txs, granularity)
    if not present:
        return []
    buckets = aggregate(txs, granularity)
    out = []
    for k in contiguous_keys(present[0], present[-1]):
        b = buckets.get(k)
        out.append((k, b.savings if b is not None else 0.0))
    return out


def savings_forecast(
    transactions: Iterable[Transaction],
    horizon: int = DEFAULT_HORIZON,
    granularity=Granularity.MONTH,
) -> ForecastView:
    gran = as_granularity(granularity)
    historical = savings_series(transactions, gran)
    result = forecast([v for _, v in historical], horizon)

    labelled: List[ForecastPoint] = []
    if historical:
        last = historical[-1][0]
        for i, (p, b) in enumerate(zip(result.points, result.band)):
            labelled.append(ForecastPoint(
                period_key=shift_period_key(last, i + 1),
                value=p,
                lower=b.lower,
                upper=b.upper,
            ))
    return ForecastView(historical=tuple(historical), forecast=tuple(labelled), result=result)
