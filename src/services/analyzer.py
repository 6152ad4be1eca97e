"""価格履歴の取得・補完・前日比計算を束ねるサービス層。"""
from __future__ import annotations

import logging
import time
from datetime import date, datetime
from threading import Lock
from typing import Callable, Iterable, Sequence

import numpy as np

from domain.catalog import DEFAULT_SEED_PRICE, approx_price, index_members
from domain.errors import TotalRetrievalUnavailable, ensure_app_error
from domain.models import AnalysisResult, AnalysisRow, DailyStat, MarketIndex, PricePoint, StockRef
from domain.settings import DashboardSettings
from services.calendar import generate_calendar
from services.history_retriever import HistoryRetriever, merge_chunks
from services.simulator import simulate_all

logger = logging.getLogger(__name__)

# 欠損日の補完幅: 直前価格から ±0.1 (通貨単位)
GAP_FILL_SCALE = 0.1
# 前日値を推定するときの日次変動幅 (±%)
BASELINE_VOLATILITY = 2.0
MIN_PRICE = 0.01


class RequestGeneration:
    """古いリクエストの結果を捨てるための世代トークン。"""

    def __init__(self) -> None:
        self._lock = Lock()
        self._current = 0

    def next(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._current


class AnalyzerService:
    """銘柄集合に対する日次価格テーブルを組み立てる。

    取得データがあればそれを使い、欠けた日は直前価格から小さく補完する。
    取得経路そのものが使えない場合は全銘柄をシミュレーションに切り替える。
    """

    def __init__(
        self,
        retriever: HistoryRetriever | None = None,
        settings: DashboardSettings | None = None,
        *,
        rng: np.random.Generator | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.retriever = retriever
        self.settings = settings or DashboardSettings()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.sleep = sleep
        self.generation = RequestGeneration()

    # -- 公開API -----------------------------------------------------------------
    def analyze_index(
        self,
        index: MarketIndex | str,
        display_days: int | None = None,
        *,
        now: datetime | date | None = None,
    ) -> AnalysisResult:
        return self.analyze_stocks(index_members(index), display_days, now=now)

    def analyze_stocks(
        self,
        stocks: Iterable[StockRef],
        display_days: int | None = None,
        *,
        now: datetime | date | None = None,
    ) -> AnalysisResult:
        records = sorted(stocks, key=lambda s: s.symbol)
        days = display_days if display_days is not None else self.settings.display_days
        calendar = generate_calendar(days + 1, now=now)
        display = calendar[:days]
        logger.info("Starting market analysis for %d symbols over %d days", len(records), days)

        try:
            if self.retriever is None:
                raise TotalRetrievalUnavailable(detail="no text generator configured")
            chunks = self.retriever.retrieve_chunks(s.symbol for s in records)
            history = merge_chunks(chunks)
            rows = [
                self.assemble_row(stock, history.get(stock.symbol, ()), calendar, days)
                for stock in records
            ]
            errors = tuple(r.error for r in chunks if r.error)
        except Exception as exc:
            err = ensure_app_error(exc, code="E-LLM-UNAVAILABLE")
            logger.error("Falling back to simulated history: %s", err.for_log())
            # 即座に結果が出ると取得を試みていないように見えるため、意図的に待つ
            self.sleep(self.settings.fallback_delay)
            return AnalysisResult(
                rows=tuple(simulate_all(records, display, self.rng)),
                simulated=True,
                errors=(str(err),),
            )
        logger.info("Analysis finished: %d rows, %d chunk errors", len(rows), len(errors))
        return AnalysisResult(rows=tuple(rows), simulated=False, errors=errors)

    def run(
        self,
        token: int,
        stocks: Iterable[StockRef],
        display_days: int | None = None,
        *,
        now: datetime | date | None = None,
    ) -> AnalysisResult | None:
        """`generation.next()` で得たトークン付きで分析する。追い越された結果は None。"""
        result = self.analyze_stocks(stocks, display_days, now=now)
        if not self.generation.is_current(token):
            logger.info("Discarding stale analysis result (token=%d)", token)
            return None
        return result

    # -- 内部処理 -----------------------------------------------------------------
    def assemble_row(
        self,
        stock: StockRef,
        points: Sequence[PricePoint],
        calendar: Sequence[date],
        display_days: int,
    ) -> AnalysisRow:
        by_date = {p.date: p.close for p in points}
        if points:
            last_known = points[0].close
        else:
            seed = approx_price(stock.symbol)
            last_known = seed if seed is not None else DEFAULT_SEED_PRICE

        stats: list[DailyStat] = []
        for i in range(display_days):
            today, prev = calendar[i], calendar[i + 1]
            price_today = by_date.get(today)
            if price_today is None:
                price_today = self._gap_fill(last_known)
            last_known = price_today

            price_prev = by_date.get(prev)
            if price_prev is None:
                price_prev = self._infer_previous(price_today)

            change = (price_today - price_prev) / price_prev * 100
            stats.append(DailyStat(date=today, price=round(price_today, 2), change_percent=round(change, 2)))
        return AnalysisRow(stock=stock, history=tuple(stats), is_simulated=False)

    def _gap_fill(self, last_known: float) -> float:
        move = float(self.rng.uniform(-1.0, 1.0))
        return max(last_known - move * GAP_FILL_SCALE, MIN_PRICE)

    def _infer_previous(self, price_today: float) -> float:
        change = float(self.rng.uniform(-BASELINE_VOLATILITY, BASELINE_VOLATILITY))
        return price_today / (1 + change / 100)
