from __future__ import annotations
from typing import Iterable, List, Set

from finance_engine.core.dates import parse_period_key, period_key, shift_period_key
from finance_engine.core.models import Granularity, Transaction


def periods_present(transactions: Iterable[Transaction], granularity=Granularity.MONTH) -> List[str]:
  ks: Set[str] = set(period_key(t.date, granularity) for t in transactions)
  return sorted(ks)


def contiguous_keys(first: str, last: str) -> List[str]:
  """Every period key from first to last inclusive (both the same granularity)."""
  a, b = parse_period_key(first), parse_period_key(last)
  if (a[1] is None) != (b[1] is None):
    raise ValueError(f"cannot span {first!r} to {last!r}: mixed granularity")
  if last < first:
    return []
  keys = [first]
  while keys[-1] != last:
    keys.append(shift_period_key(keys[-1], 1))
  return keys
