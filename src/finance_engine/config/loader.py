from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from finance_engine.core.models import EngineCfg

REQUIRED_SECTIONS = ("engine", "paths")


@dataclass
class PathsCfg:
  data_dir: Path
  reports_dir: Path
  config_dir: Path


@dataclass
class LoggingCfg:
  level: str = "INFO"
  fmt: str | None = None


@dataclass
class Settings:
  engine: EngineCfg
  paths: PathsCfg
  logging: LoggingCfg


def load_settings(repo_root: Path) -> Settings:
  """Load config/settings.yaml under repo_root."""
  cfg_dir = repo_root / "config"
  yaml_cfg = cfg_dir / "settings.yaml"

  try:
    import yaml  # type: ignore
  except ImportError as e:
    raise ImportError(
      "PyYAML is required to read config/settings.yaml. Install with: pip install pyyaml"
    ) from e

  if not yaml_cfg.exists():
    raise FileNotFoundError(f"Missing {yaml_cfg}.")

  y: Dict[str, Any] = yaml.safe_load(yaml_cfg.read_text(encoding="utf-8")) or {}
  if not isinstance(y, dict):
    raise ValueError(f"{yaml_cfg} must contain a mapping at the top level")

  # fail fast with clear messages
  for section in REQUIRED_SECTIONS:
    if section not in y:
      raise KeyError(f"settings.yaml is missing the '{section}' section")

  paths = y["paths"]
  log = y.get("logging") or {}

  engine = EngineCfg(**(y["engine"] or {}))
  if engine.forecast_horizon < 0:
    raise ValueError("engine.forecast_horizon must be >= 0")
  if engine.z_threshold <= 0:
    raise ValueError("engine.z_threshold must be > 0")

  return Settings(
    engine=engine,
    paths=PathsCfg(
      data_dir=(repo_root / paths["data_dir"]).resolve(),
      reports_dir=(repo_root / paths["reports_dir"]).resolve(),
      config_dir=cfg_dir.resolve(),
    ),
    logging=LoggingCfg(
      level=str(log.get("level", "INFO")),
      fmt=log.get("format"),
    ),
  )
