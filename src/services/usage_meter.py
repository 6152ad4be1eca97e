"""リモート呼び出し回数の計測と購読。上限は目安で、強制はしない。"""
from __future__ import annotations

import logging
from threading import Lock
from typing import Callable

logger = logging.getLogger(__name__)

# Gemini Flash 無料枠の1日あたりリクエスト数
DAILY_QUOTA = 1500

Listener = Callable[[int], None]


class UsageMeter:
    def __init__(self) -> None:
        self._lock = Lock()
        self._count = 0
        self._listeners: list[Listener] = []

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def increment(self) -> int:
        with self._lock:
            self._count += 1
            count = self._count
            listeners = tuple(self._listeners)
        self._notify(listeners, count)
        return count

    def subscribe(self, fn: Listener) -> Callable[[], None]:
        """購読を登録し、現在値を即座に通知する。戻り値を呼ぶと解除される。"""
        with self._lock:
            self._listeners.append(fn)
            count = self._count
        self._notify((fn,), count)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._listeners.remove(fn)
                except ValueError:
                    pass

        return unsubscribe

    def remaining(self, quota: int = DAILY_QUOTA) -> int:
        return max(quota - self.count, 0)

    def reset(self) -> None:
        with self._lock:
            self._count = 0
            listeners = tuple(self._listeners)
        self._notify(listeners, 0)

    @staticmethod
    def _notify(listeners: tuple[Listener, ...], count: int) -> None:
        for fn in listeners:
            try:
                fn(count)
            except Exception:
                logger.exception("Usage listener failed for count=%d", count)


# プロセス全体で共有する計測器。起動時に生成し、破棄しない。
usage_meter = UsageMeter()
