from __future__ import annotations

import math

import pytest

from finance_engine.analytics.forecast import (
    fit_line,
    forecast,
    population_std,
    savings_forecast,
    savings_series,
)


def test_flat_series_has_zero_slope_and_zero_width_band() -> None:
    res = forecast([5, 5, 5, 5], horizon=3)
    assert res.slope == pytest.approx(0.0)
    assert res.points == pytest.approx((5.0, 5.0, 5.0))
    assert res.sigma == 0.0
    assert all(b.upper - b.lower == 0 for b in res.band)


def test_empty_series_does_not_raise() -> None:
    res = forecast([], horizon=3)
    assert (res.slope, res.intercept) == (0.0, 0.0)
    assert res.points == (0.0, 0.0, 0.0)


def test_single_point_series_is_flat_through_it() -> None:
    res = forecast([42.0], horizon=2)
    assert (res.slope, res.intercept) == (0.0, 42.0)
    assert res.points == (42.0, 42.0)


def test_perfect_line_is_recovered() -> None:
    res = forecast([1, 3, 5, 7], horizon=2)
    assert res.slope == pytest.approx(2.0)
    assert res.intercept == pytest.approx(1.0)
    assert res.points == pytest.approx((9.0, 11.0))


def test_band_is_population_std_of_input() -> None:
    series = [2, 4, 4, 4, 5, 5, 7, 9]
    assert population_std(series) == pytest.approx(2.0)
    res = forecast(series, horizon=4)
    for p, b in zip(res.points, res.band):
        assert b.lower == pytest.approx(p - 2.0)
        assert b.upper == pytest.approx(p + 2.0)
    widths = {round(b.upper - b.lower, 9) for b in res.band}
    assert widths == {4.0}


def test_horizon_zero_keeps_coefficients() -> None:
    res = forecast([1, 2, 3], horizon=0)
    assert res.points == ()
    assert res.band == ()
    assert res.slope == pytest.approx(1.0)


def test_fit_line_matches_closed_form() -> None:
    ys = [3.0, 1.0, 4.0, 1.0, 5.0]
    n = len(ys)
    sx, sy = sum(range(n)), sum(ys)
    sxy = sum(i * y for i, y in enumerate(ys))
    sxx = sum(i * i for i in range(n))
    slope = (n * sxy - sx * sy) / (n * sxx - sx ** 2)
    got = fit_line(ys)
    assert got[0] == pytest.approx(slope)
    assert got[1] == pytest.approx((sy - slope * sx) / n)


@pytest.mark.parametrize("horizon", [-1, 1.5, True, "3"])
def test_bad_horizon_is_rejected(horizon) -> None:
    with pytest.raises((TypeError, ValueError)):
        forecast([1, 2], horizon=horizon)


def test_non_finite_series_is_rejected() -> None:
    with pytest.raises(ValueError):
        forecast([1.0, math.nan])
    with pytest.raises(TypeError):
        forecast([1.0, "2"])


def test_savings_series_zero_fills_gaps(tx) -> None:
    txs = [
        tx("2026-01-05", 1000, "Salary", "income"),
        tx("2026-01-06", 400),
        tx("2026-03-05", 1000, "Salary", "income"),
    ]
    assert savings_series(txs) == [("2026-01", 600.0), ("2026-02", 0.0), ("2026-03", 1000.0)]


def test_savings_forecast_labels_following_periods(tx) -> None:
    txs = [
        tx("2025-11-05", 100, "Salary", "income"),
        tx("2025-12-05", 200, "Salary", "income"),
        tx("2026-01-05", 300, "Salary", "income"),
    ]
    view = savings_forecast(txs, horizon=2)
    assert [k for k, _ in view.historical] == ["2025-11", "2025-12", "2026-01"]
    assert [p.period_key for p in view.forecast] == ["2026-02", "2026-03"]
    assert [p.value for p in view.forecast] == pytest.approx([400.0, 500.0])
    assert view.result.slope == pytest.approx(100.0)


def test_savings_forecast_without_data() -> None:
    view = savings_forecast([], horizon=3)
    assert view.historical == ()
    assert view.forecast == ()
    assert view.result.points == (0.0, 0.0, 0.0)
