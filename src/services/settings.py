"""config.yaml からダッシュボード設定を読み込む。"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml

from domain.settings import DashboardSettings

logger = logging.getLogger(__name__)


def _safe_int(value, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _safe_float(value, fallback: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


def settings_from_config(config_path: Path = Path("config.yaml")) -> DashboardSettings:
    defaults = DashboardSettings()
    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except Exception:
        logger.debug("Failed to load dashboard settings from %s", config_path)
        return defaults
    if not isinstance(raw, dict):
        return defaults

    analysis_cfg = raw.get("analysis", {}) if isinstance(raw.get("analysis"), dict) else {}
    retrieval_cfg = raw.get("retrieval", {}) if isinstance(raw.get("retrieval"), dict) else {}

    return DashboardSettings(
        display_days=max(_safe_int(analysis_cfg.get("display_days"), defaults.display_days), 1),
        fallback_delay=max(_safe_float(analysis_cfg.get("fallback_delay"), defaults.fallback_delay), 0.0),
        max_symbols=max(_safe_int(analysis_cfg.get("max_symbols"), defaults.max_symbols), 1),
        chunk_size=max(_safe_int(retrieval_cfg.get("chunk_size"), defaults.chunk_size), 1),
        sessions=max(_safe_int(retrieval_cfg.get("sessions"), defaults.sessions), 1),
        model=str(retrieval_cfg.get("model") or defaults.model),
        api_key_env=str(retrieval_cfg.get("api_key_env") or defaults.api_key_env),
        daily_quota=_safe_int(retrieval_cfg.get("daily_quota"), defaults.daily_quota),
    )
