"""logging設定と状態表示向けログバッファを初期化するヘルパー。"""
from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from collections import deque
from pathlib import Path
from threading import Lock
from typing import Deque

import yaml


_CONFIGURED = False
_RECENT_HANDLER: "RecentLogHandler" | None = None
_LOGGER_NAME = "egx_trends"


class RecentLogHandler(logging.Handler):
    """ダッシュボードの状態欄で使う直近ログのリングバッファ。"""

    def __init__(self, capacity: int = 200) -> None:
        super().__init__()
        self._capacity = capacity
        self._lock = Lock()
        self._buffer: Deque[str] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        message = self.format(record)
        with self._lock:
            self._buffer.append(message)

    def lines(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._buffer)


def configure_logging(config_path: Path = Path("config.yaml"), *, console: bool = True) -> RecentLogHandler:
    """設定ファイルを元に logging を初期化し、直近ログ用ハンドラを返す。"""

    global _CONFIGURED, _RECENT_HANDLER
    if _CONFIGURED and _RECENT_HANDLER is not None:
        return _RECENT_HANDLER

    config: dict[str, object]
    try:
        config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except Exception:
        config = {}

    # サポートリンクのキャッシュは設定変更に追随できるようクリア
    from domain.errors import _load_support_links, _load_error_support_map

    _load_support_links.cache_clear()
    _load_error_support_map.cache_clear()

    logging_cfg = config.get("logging", {}) if isinstance(config, dict) else {}
    if not isinstance(logging_cfg, dict):
        logging_cfg = {}
    level_name = str(logging_cfg.get("level", "INFO"))
    level = getattr(logging, level_name.upper(), logging.INFO)
    log_path = Path(logging_cfg.get("path", "logs/app.log"))
    rotate_keep = logging_cfg.get("rotate_keep", 7)
    try:
        rotate_keep = int(rotate_keep)
    except (TypeError, ValueError):
        rotate_keep = 7
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        log_path = Path.cwd() / log_path.name

    logger = logging.getLogger()
    logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handlers: list[logging.Handler] = [
        TimedRotatingFileHandler(
            filename=str(log_path),
            when="midnight",
            backupCount=max(rotate_keep, 0),
            encoding="utf-8",
            utc=False,
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    recent = RecentLogHandler()
    handlers.append(recent)

    # 既存ハンドラを削除して二重登録を防ぐ
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logging.getLogger(_LOGGER_NAME).setLevel(level)

    _CONFIGURED = True
    _RECENT_HANDLER = recent
    return recent


def get_recent_log_lines() -> tuple[str, ...]:
    if _RECENT_HANDLER is None:
        return ()
    return _RECENT_HANDLER.lines()
