from __future__ import annotations
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from finance_engine.analytics.forecast import population_std
from finance_engine.core.models import AnomalyFlag, Transaction, TxType

DEFAULT_Z_THRESHOLD = 2.0
MIN_OBSERVATIONS = 3


def _check_params(year: int, z_threshold: float, min_observations: int) -> None:
    if isinstance(year, bool) or not isinstance(year, int):
        raise TypeError(f"year must be an int, got {type(year).__name__}")
    if isinstance(z_threshold, bool) or not isinstance(z_threshold, (int, float)):
        raise TypeError(f"z_threshold must be a number, got {type(z_threshold).__name__}")
    if not math.isfinite(z_threshold) or z_threshold <= 0:
        raise ValueError(f"z_threshold must be a finite number > 0, got {z_threshold!r}")
    if isinstance(min_observations, bool) or not isinstance(min_observations, int) \
            or min_observations < 2:
        raise ValueError(f"min_observations must be an int >= 2, got {min_observations!r}")


def category_month_grid(transactions: Iterable[Transaction], year: int) -> Dict[str, List[float]]:
    """{category: 12 monthly expense totals} for one year."""
    parts: Dict[str, List[List[float]]] = defaultdict(lambda: [[] for _ in range(12)])
    for t in transactions:
        if t.type is not TxType.EXPENSE or t.date.year != year:
            continue
        parts[t.category][t.date.month - 1].append(t.amount)
    return {c: [math.fsum(m) for m in months] for c, months in sorted(parts.items())}


def _nonzero_stats(values: List[float]) -> Tuple[int, float, float]:
    nz = [v for v in values if v != 0]
    if not nz:
        return 0, 0.0, 0.0
    return len(nz), math.fsum(nz) / len(nz), population_std(nz)


def detect_anomalies(
    transactions: Iterable[Transaction],
    year: int,
    z_threshold: float = DEFAULT_Z_THRESHOLD,
    min_observations: int = MIN_OBSERVATIONS,
) -> List[AnomalyFlag]:
    """Flag months where a category's spend is unusually high for that year.

    Stats use non-zero months only so a sparse category is not diluted by
    empty months; empty months are never flagged either. Only above-mean
    outliers are returned, most anomalous first.
    """
    _check_params(year, z_threshold, min_observations)

    flags: List[AnomalyFlag] = []
    for category, months in category_month_grid(transactions, year).items():
        n, mean, sd = _nonzero_stats(months)
        if n < min_observations or sd <= 0:
            continue
        for idx, value in enumerate(months):
            if value == 0:
                continue
            z = (value - mean) / sd
            if z >= z_threshold:
                flags.append(AnomalyFlag(
                    category=category,
                    period_index=idx,
                    period_key=f"{year:04d}-{idx + 1:02d}",
                    value=value,
                    mean=mean,
                    std_dev=sd,
                    z_score=z,
                ))

    flags.sort(key=lambda f: (-f.z_score, f.category, f.period_index))
    return flags
