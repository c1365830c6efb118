from __future__ import annotations
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from dateutil import parser as dup

from finance_engine.core.models import Transaction, TxId, TxType

DEFAULT_CATEGORY = "Other"


@dataclass(frozen=True)
class NormalizeReport:
  transactions: List[Transaction]
  dropped: int


def parse_date_or_none(value: Any) -> Optional[datetime]:
  """Parse a stored date into a naive local datetime; None when unusable.

  Accepts datetime/date objects, epoch milliseconds and anything dateutil
  can read. Aware values are moved to local time before dropping tzinfo.
  """
  if value is None or isinstance(value, bool):
    return None
  if isinstance(value, datetime):
    d = value
  elif isinstance(value, date):
    d = datetime.combine(value, time.min)
  elif isinstance(value, (int, float)):
    try:
      if not math.isfinite(value):
        return None
      d = datetime.fromtimestamp(value / 1000.0)
    except (OverflowError, OSError, ValueError):
      return None
  else:
    s = str(value).strip()
    if not s:
      return None
    try:
      d = dup.parse(s)
    except (ValueError, OverflowError):
      return None
  if d.tzinfo is not None:
    d = d.astimezone().replace(tzinfo=None)
  return d


def safe_amount(value: Any) -> float:
  if isinstance(value, str):
    value = value.replace("$", "").replace(",", "").strip()
  try:
    n = float(value)
  except (TypeError, ValueError, OverflowError):
    return 0.0
  return abs(n) if math.isfinite(n) else 0.0


def safe_category(value: Any, fallback: str = DEFAULT_CATEGORY) -> str:
  s = "" if value is None else str(value).strip()
  return s or fallback


def safe_type(value: Any) -> TxType:
  if value is TxType.INCOME or value == "income":
    return TxType.INCOME
  return TxType.EXPENSE


def safe_id(value: Any) -> Optional[TxId]:
  """The stored id as-is; None when missing or not a string or number."""
  if value is None or isinstance(value, bool):
    return None
  if isinstance(value, (str, int)):
    return value
  if isinstance(value, float) and math.isfinite(value):
    return value
  return None


def normalize_transaction(
  raw: Any,
  *,
  default_category: str = DEFAULT_CATEGORY,
  fill_missing_dates: bool = False,
  now: Optional[datetime] = None,
) -> Optional[Transaction]:
  """Return a Transaction, or None when the record cannot be represented."""
  if not isinstance(raw, Mapping):
    return None
  tx_id = safe_id(raw.get("id"))
  if tx_id is None:
    return None

  d = parse_date_or_none(raw.get("date"))
  if d is None:
    if not fill_missing_dates:
      return None
    d = now or datetime.now()

  desc = raw.get("description")
  return Transaction(
    id=tx_id,
    date=d,
    type=safe_type(raw.get("type")),
    category=safe_category(raw.get("category"), default_category),
    amount=safe_amount(raw.get("amount")),
    description="" if desc is None else str(desc),
  )


def normalize_with_report(
  raw_rows: Any,
  *,
  default_category: str = DEFAULT_CATEGORY,
  fill_missing_dates: bool = False,
  now: Optional[datetime] = None,
) -> NormalizeReport:
  if raw_rows is None or isinstance(raw_rows, (str, bytes, Mapping)) \
      or not isinstance(raw_rows, Iterable):
    return NormalizeReport(transactions=[], dropped=0)

  if fill_missing_dates and now is None:
    # one timestamp per call so every filled record agrees
    now = datetime.now()

  out: List[Transaction] = []
  dropped = 0
  for r in raw_rows:
    t = normalize_transaction(
      r,
      default_category=default_category,
      fill_missing_dates=fill_missing_dates,
      now=now,
    )
    if t is None:
      dropped += 1
      continue
    out.append(t)
  return NormalizeReport(transactions=out, dropped=dropped)


def normalize_transactions(raw_rows: Any, **kwargs) -> List[Transaction]:
  return normalize_with_report(raw_rows, **kwargs).transactions


def positive_limit(value: Any) -> Optional[float]:
  if isinstance(value, bool):
    return None
  try:
    n = float(value)
  except (TypeError, ValueError, OverflowError):
    return None
  return n if math.isfinite(n) and n > 0 else None


def sanitize_budgets(raw: Any) -> Dict[str, Dict[str, float]]:
  """{month_key: {category: limit}} with only finite, positive limits kept."""
  if not isinstance(raw, Mapping):
    return {}
  out: Dict[str, Dict[str, float]] = {}
  for month, cats in raw.items():
    if not isinstance(cats, Mapping):
      continue
    clean: Dict[str, float] = {}
    for cat, limit in cats.items():
      n = positive_limit(limit)
      if n is not None:
        clean[str(cat)] = n
    out[str(month)] = clean
  return out
