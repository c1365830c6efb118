from __future__ import annotations

import json
from datetime import date, datetime, timedelta, timezone

from finance_engine.core.models import TxType
from finance_engine.normalize import (
    normalize_transaction,
    normalize_transactions,
    normalize_with_report,
    parse_date_or_none,
    safe_amount,
    sanitize_budgets,
)


def test_normalize_coerces_loose_fields() -> None:
    out = normalize_transactions([
        {"id": "a1", "date": "2026-03-04", "type": "income", "category": "  Salary ",
         "amount": "1,200.50", "description": None},
    ])
    assert len(out) == 1
    t = out[0]
    assert t.id == "a1"
    assert t.date == datetime(2026, 3, 4)
    assert t.type is TxType.INCOME
    assert t.category == "Salary"
    assert t.amount == 1200.5
    assert t.description == ""


def test_type_is_expense_unless_exactly_income() -> None:
    out = normalize_transactions([
        {"id": 1, "date": "2026-01-01", "type": "Income"},
        {"id": 2, "date": "2026-01-01", "type": None},
        {"id": 3, "date": "2026-01-01", "type": "income"},
    ])
    assert [t.type for t in out] == [TxType.EXPENSE, TxType.EXPENSE, TxType.INCOME]


def test_blank_category_defaults_to_other() -> None:
    out = normalize_transactions([
        {"id": 1, "date": "2026-01-01", "category": "   "},
        {"id": 2, "date": "2026-01-01"},
    ])
    assert [t.category for t in out] == ["Other", "Other"]

    custom = normalize_transactions([{"id": 1, "date": "2026-01-01"}], default_category="Misc")
    assert custom[0].category == "Misc"


def test_non_finite_or_garbage_amount_becomes_zero() -> None:
    assert safe_amount(float("nan")) == 0.0
    assert safe_amount(float("inf")) == 0.0
    assert safe_amount("abc") == 0.0
    assert safe_amount(None) == 0.0
    assert safe_amount(-42) == 42.0


def test_records_without_id_or_date_are_dropped() -> None:
    report = normalize_with_report([
        {"date": "2026-01-01", "amount": 5},
        {"id": 7, "date": "garbage", "amount": 5},
        "not a record",
        None,
        {"id": 8, "date": "2026-01-02", "amount": 5},
    ])
    assert [t.id for t in report.transactions] == [8]
    assert report.dropped == 4


def test_fill_missing_dates_only_applies_to_records_with_id() -> None:
    now = datetime(2026, 10, 19, 12, 0)
    out = normalize_transactions(
        [{"id": 1, "date": "garbage"}, {"date": "garbage"}],
        fill_missing_dates=True,
        now=now,
    )
    assert len(out) == 1
    assert out[0].date == now


def test_renormalization_keeps_ids_stable() -> None:
    raw = [{"id": 10, "date": "2026-01-01"}, {"id": "x", "date": "2026-01-02"}]
    assert [t.id for t in normalize_transactions(raw)] == [t.id for t in normalize_transactions(raw)]


def test_non_list_input_yields_empty() -> None:
    assert normalize_transactions(None) == []
    assert normalize_transactions({"id": 1}) == []
    assert normalize_transactions("oops") == []


def test_parse_date_variants() -> None:
    assert parse_date_or_none(date(2026, 2, 1)) == datetime(2026, 2, 1)
    assert parse_date_or_none("") is None
    assert parse_date_or_none(True) is None
    aware = datetime(2026, 2, 1, 12, tzinfo=timezone(timedelta(hours=3)))
    parsed = parse_date_or_none(aware)
    assert parsed.tzinfo is None
    assert parsed == aware.astimezone().replace(tzinfo=None)
    ms = datetime(2026, 2, 1, 8, 30).timestamp() * 1000
    assert parse_date_or_none(ms) == datetime(2026, 2, 1, 8, 30)


def test_normalize_transaction_rejects_non_mapping() -> None:
    assert normalize_transaction(["id", 1]) is None


def test_sanitize_budgets_keeps_positive_limits_only() -> None:
    raw = {
        "2026-03": {"Food": "500", "Fun": 0, "Rent": -3, "Bills": "x", "Gym": float("inf")},
        "2026-04": {},
        "2026-05": ["bad"],
    }
    assert sanitize_budgets(raw) == {"2026-03": {"Food": 500.0}, "2026-04": {}}
    assert sanitize_budgets(None) == {}


def test_ids_pass_through_unchanged() -> None:
    raw = [
        {"id": " a1 ", "date": "2026-01-01"},
        {"id": "a1", "date": "2026-01-01"},
        {"id": 1.5, "date": "2026-01-01"},
        {"id": "", "date": "2026-01-01"},
        {"id": True, "date": "2026-01-01"},
        {"id": float("nan"), "date": "2026-01-01"},
        {"id": ["x"], "date": "2026-01-01"},
    ]
    assert [t.id for t in normalize_transactions(raw)] == [" a1 ", "a1", 1.5, ""]


def test_huge_json_integers_do_not_raise() -> None:
    huge = "1" + "0" * 400
    rows = json.loads(
        f'[{{"id": 1, "date": "2026-01-01", "amount": {huge}}},'
        f' {{"id": 2, "date": {huge}, "amount": 5}}]'
    )
    report = normalize_with_report(rows)
    assert [(t.id, t.amount) for t in report.transactions] == [(1, 0.0)]
    assert report.dropped == 1

    budgets = json.loads(f'{{"2026-01": {{"Food": {huge}, "Fun": 20}}}}')
    assert sanitize_budgets(budgets) == {"2026-01": {"Fun": 20.0}}
