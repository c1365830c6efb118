"""Shared fixtures: a transaction factory and a small two-year snapshot."""

from __future__ import annotations

from datetime import datetime
from itertools import count

import pytest

from finance_engine.core.models import Transaction, TxType


@pytest.fixture
def tx():
    """Build a Transaction from an ISO date string; ids auto-increment."""
    ids = count(1)

    def _make(
        when: str,
        amount: float,
        category: str = "Food",
        type: str = "expense",
        description: str = "",
    ) -> Transaction:
        return Transaction(
            id=next(ids),
            date=datetime.fromisoformat(when),
            type=TxType(type),
            category=category,
            amount=float(amount),
            description=description,
        )

    return _make


@pytest.fixture
def raw_snapshot() -> list[dict]:
    return [
        {"id": 1, "date": "2025-01-05", "type": "income", "category": "Salary", "amount": 3000},
        {"id": 2, "date": "2025-01-09", "type": "expense", "category": "Food", "amount": 200},
        {"id": 3, "date": "2025-02-10", "type": "expense", "category": "Housing", "amount": 1200},
        {"id": 4, "date": "2026-01-05", "type": "income", "category": "Salary", "amount": 3600},
        {"id": 5, "date": "2026-01-12", "type": "expense", "category": "Food", "amount": 260},
        {"id": 6, "date": "2026-02-03", "type": "expense", "category": "Food", "amount": 240},
        {"id": 7, "date": "2026-03-03", "type": "expense", "category": "Food", "amount": 900},
        {"id": 8, "date": "2026-03-15", "type": "expense", "category": "Bills", "amount": 150.5},
        {"id": 9, "date": "not a date", "type": "expense", "amount": 10},
        {"date": "2026-03-20", "type": "expense", "amount": 99},
    ]
