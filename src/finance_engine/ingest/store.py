from __future__ import annotations
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from finance_engine.logging_setup import get_logger

_logger = get_logger("finance_engine.ingest.store")

SUPPORTED_SUFFIXES = (".json", ".csv")
CSV_COLUMNS = ["id", "date", "type", "category", "amount", "description"]


@dataclass
class Snapshot:
    """Raw, unvalidated records as the persistence layer handed them over."""
    transactions: List[Any] = field(default_factory=list)
    budgets: Dict[str, Any] = field(default_factory=dict)


def _cell(x):
    if pd.isna(x):
        return None
    return x


def _from_payload(payload: Any) -> Snapshot:
    # bare list | {transactions, budgets} | {data: {transactions, budgets}}
    if isinstance(payload, list):
        return Snapshot(transactions=payload)
    if not isinstance(payload, dict):
        raise ValueError(f"Unsupported snapshot payload: {type(payload).__name__}")
    data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    txs = data.get("transactions")
    budgets = data.get("budgets")
    return Snapshot(
        transactions=txs if isinstance(txs, list) else [],
        budgets=budgets if isinstance(budgets, dict) else {},
    )


def read_transactions_csv(csv_path: Path) -> List[Dict[str, Any]]:
    try:
        df = pd.read_csv(csv_path, dtype=object)
    except pd.errors.EmptyDataError:
        return []
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = {"id", "date"} - set(df.columns)
    if missing:
        raise ValueError(f"{csv_path.name} is missing columns: {sorted(missing)}. Found: {list(df.columns)}")

    cols = [c for c in CSV_COLUMNS if c in df.columns]
    return [{c: _cell(row[c]) for c in cols} for _, row in df.iterrows()]


def load_snapshot(path: Path) -> Snapshot:
    """Read a .json snapshot (transactions + budgets) or a .csv of transactions."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No snapshot at {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported snapshot type {suffix!r}; expected one of {SUPPORTED_SUFFIXES}")

    if suffix == ".csv":
        snap = Snapshot(transactions=read_transactions_csv(path))
    else:
        snap = _from_payload(json.loads(path.read_text(encoding="utf-8")))
    _logger.info("Loaded %d raw transactions from %s", len(snap.transactions), path.name)
    return snap
