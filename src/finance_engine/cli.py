from __future__ import annotations
import argparse
from datetime import date
from pathlib import Path
from typing import List, Optional

from finance_engine.config.loader import load_settings
from finance_engine.ingest.store import load_snapshot
from finance_engine.logging_setup import configure_logging, get_logger
from finance_engine.pipeline import run_pipeline
from finance_engine.reports import write_dashboard_md

_logger = get_logger("finance_engine.cli")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="finance-engine",
        description="Compute the finance dashboard for a transaction snapshot.",
    )
    p.add_argument("snapshot", type=Path, help=".json snapshot or .csv of transactions")
    p.add_argument("--repo-root", type=Path, default=Path.cwd(),
                   help="directory holding config/settings.yaml (default: cwd)")
    p.add_argument("--year", type=int, default=None, help="year to analyse (default: today's)")
    p.add_argument("--today", type=date.fromisoformat, default=None,
                   help="override today's date, YYYY-MM-DD")
    p.add_argument("--budget-month", default=None, help="YYYY-MM for budget tracking")
    p.add_argument("--log-level", default=None, help="overrides settings.yaml logging.level")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.repo_root.resolve())
    configure_logging(args.log_level or settings.logging.level, fmt=settings.logging.fmt)

    snap = load_snapshot(args.snapshot)
    dash = run_pipeline(
        snap.transactions,
        snap.budgets,
        settings.engine,
        today=args.today or date.today(),
        year=args.year,
        budget_month=args.budget_month,
    )
    out = write_dashboard_md(settings.paths.reports_dir, dash)
    _logger.info("Wrote %s", out)
    print(f"Dashboard written to {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
