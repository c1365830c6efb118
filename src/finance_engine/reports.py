from __future__ import annotations
from pathlib import Path
from typing import List, Optional

from finance_engine.pipeline import Dashboard


def ensure_dir(p: Path):
  p.mkdir(parents=True, exist_ok=True)


def _num(v: float) -> str:
  return f"{v:,.2f}"


def _pct(v: Optional[float]) -> str:
  return "—" if v is None else f"{v:+.1f}%"


def _delta(v: Optional[float]) -> str:
  return "—" if v is None else f"{v:+,.2f}"


def dashboard_lines(d: Dashboard) -> List[str]:
  lines: List[str] = []
  lines.append(f"# {d.year} — Finance Dashboard\n")
  lines.append(f"_As of {d.today.isoformat()}. Amounts are unformatted; no currency applied._\n")
  lines.append(f"- **Income:** {_num(d.summary.income)}")
  lines.append(f"- **Expenses:** {_num(d.summary.expenses)}")
  lines.append(f"- **Balance:** {_num(d.summary.balance)}")
  lines.append(f"- **Transactions:** {d.summary.count}")
  if d.dropped:
    lines.append(f"- **Skipped records:** {d.dropped}")
  lines.append("")

  if d.years:
    lines.append("## Year comparison\n")
    lines.append("| Year | Income | YoY | Expenses | YoY | Savings | Change |")
    lines.append("|---|---:|---:|---:|---:|---:|---:|")
    for r in d.years:
      lines.append(
        f"| {r.year} | {_num(r.bucket.income)} | {_pct(r.yoy.income_pct)} "
        f"| {_num(r.bucket.expenses)} | {_pct(r.yoy.expenses_pct)} "
        f"| {_num(r.bucket.savings)} | {_delta(r.yoy.savings_delta)} |"
      )
    lines.append("")

  cur_key, base_key, res = d.month_comparison
  lines.append(f"## {cur_key} vs {base_key}\n")
  lines.append(f"- Income: {_num(res.current.income)} ({_pct(res.income_pct)})")
  lines.append(f"- Expenses: {_num(res.current.expenses)} ({_pct(res.expenses_pct)})")
  lines.append(f"- Savings: {_num(res.current.savings)} ({_delta(res.savings_delta)})")
  lines.append("")

  if d.expense_drivers:
    lines.append(f"## What changed in expenses vs {d.year - 1}\n")
    for c in d.expense_drivers[:10]:
      lines.append(f"- {c.category}: {_delta(c.delta)}")
    lines.append("")

  if d.forecast.forecast:
    lines.append("## Savings forecast\n")
    lines.append(
      "_Straight-line fit; the range is ± one standard deviation of past savings, "
      "not a statistical prediction interval._\n"
    )
    lines.append("| Period | Forecast | Low | High |")
    lines.append("|---|---:|---:|---:|")
    for p in d.forecast.forecast:
      lines.append(f"| {p.period_key} | {_num(p.value)} | {_num(p.lower)} | {_num(p.upper)} |")
    lines.append("")

  if d.anomalies:
    lines.append("## Unusual spending\n")
    for a in d.anomalies[:10]:
      lines.append(
        f"- {a.period_key} **{a.category}**: {_num(a.value)} "
        f"(avg {_num(a.mean)}, z={a.z_score:.2f})"
      )
    lines.append("")

  lines.append(f"## Budgets — {d.budget_month}" + (" (locked)" if d.budget_locked else "") + "\n")
  if d.budgets:
    lines.append("| Category | Limit | Spent | Remaining | Projected | Status |")
    lines.append("|---|---:|---:|---:|---:|---|")
    for b in d.budgets:
      lines.append(
        f"| {b.category} | {_num(b.limit)} | {_num(b.spent)} | {_num(b.remaining)} "
        f"| {_num(b.projected_end_of_month)} | {b.state.value} |"
      )
  else:
    lines.append("No budgets set for this month.")
  lines.append("")
  return lines


def write_dashboard_md(reports_dir: Path, dashboard: Dashboard) -> Path:
  ensure_dir(reports_dir)
  path = reports_dir / f"dashboard-{dashboard.year}.md"
  path.write_text("\n".join(dashboard_lines(dashboard)), encoding="utf-8")
  return path
