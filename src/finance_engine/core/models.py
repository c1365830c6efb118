from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple, Union

MonthKey = str  # "YYYY-MM"
YearKey = str   # "YYYY"
TxId = Union[str, int, float]


class TxType(str, Enum):
  INCOME = "income"
  EXPENSE = "expense"


class Granularity(str, Enum):
  MONTH = "month"
  YEAR = "year"


class BudgetState(str, Enum):
  UNDER = "under"
  MET = "met"
  OVER = "over"


@dataclass(frozen=True)
class Transaction:
  id: TxId
  date: datetime          # naive, local calendar time
  type: TxType
  category: str
  amount: float           # magnitude; sign comes from type
  description: str = ""

  @property
  def month_key(self) -> MonthKey:
    return f"{self.date.year:04d}-{self.date.month:02d}"

  @property
  def year_key(self) -> YearKey:
    return f"{self.date.year:04d}"

  @property
  def is_income(self) -> bool:
    return self.type is TxType.INCOME


@dataclass(frozen=True)
class DateRange:
  """Inclusive [start, end]. Bare dates cover the whole day."""
  start: Union[date, datetime]
  end: Union[date, datetime]


@dataclass(frozen=True)
class AggregateBucket:
  period_key: str
  income: float = 0.0
  expenses: float = 0.0
  count: int = 0

  @property
  def savings(self) -> float:
    return self.income - self.expenses


@dataclass(frozen=True)
class PeriodTotals:
  income: float
  expenses: float
  count: int

  @property
  def balance(self) -> float:
    return self.income - self.expenses


@dataclass(frozen=True)
class YoYResult:
  current: AggregateBucket
  baseline: Optional[AggregateBucket]
  income_delta: Optional[float]
  expenses_delta: Optional[float]
  savings_delta: Optional[float]
  income_pct: Optional[float]
  expenses_pct: Optional[float]
  savings_pct: Optional[float]


@dataclass(frozen=True)
class Contribution:
  category: str
  delta: float
  current: float = 0.0
  baseline: float = 0.0


@dataclass(frozen=True)
class YearComparisonRow:
  year: YearKey
  bucket: AggregateBucket
  yoy: YoYResult


@dataclass(frozen=True)
class Band:
  lower: float
  upper: float


@dataclass(frozen=True)
class ForecastResult:
  slope: float
  intercept: float
  sigma: float
  points: Tuple[float, ...] = ()
  band: Tuple[Band, ...] = ()


@dataclass(frozen=True)
class ForecastPoint:
  period_key: str
  value: float
  lower: float
  upper: float


@dataclass(frozen=True)
class ForecastView:
  historical: Tuple[Tuple[str, float], ...]
  forecast: Tuple[ForecastPoint, ...]
  result: ForecastResult


@dataclass(frozen=True)
class AnomalyFlag:
  category: str
  period_index: int       # 0 = January
  period_key: MonthKey
  value: float
  mean: float
  std_dev: float
  z_score: float


@dataclass(frozen=True)
class BudgetStatus:
  category: str
  limit: float
  spent: float
  remaining: float
  state: BudgetState
  daily_rate: float
  projected_end_of_month: float
  utilization_pct: float
  level: str              # "ok" | "warning" | "exceeded"


@dataclass(frozen=True)
class WaterfallStep:
  label: str
  start: float
  end: float
  is_total: bool = False

  @property
  def value(self) -> float:
    return self.end - self.start


@dataclass(frozen=True)
class MonthlyWaterfall:
  period_key: MonthKey
  income: float
  expenses: float
  savings: float
  steps: Tuple[WaterfallStep, ...] = field(default=())


@dataclass
class EngineCfg:
  default_category: str = "Other"
  fill_missing_dates: bool = False     # give id-bearing undated records "now"

  # forecasting
  forecast_horizon: int = 3
  forecast_granularity: str = "month"  # "month" | "year"

  # anomalies
  z_threshold: float = 2.0
  min_anomaly_months: int = 3          # fewer non-zero months make z meaningless

  # budgets
  budget_warn_pct: float = 80.0
