"""共通で利用するドメインモデル定義。"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence

from io_utils.markets import chart_symbol


class MarketIndex(str, Enum):
    """分析テーブルで切り替える指数。"""

    EGX30 = "EGX30"
    EGX70 = "EGX70"


class TimeFrame(str, Enum):
    """チャートウィジェットに渡す足種。"""

    MIN_1 = "1"
    MIN_5 = "5"
    MIN_15 = "15"
    HOUR_1 = "60"
    HOUR_4 = "240"
    DAY = "D"
    WEEK = "W"
    MONTH = "M"


@dataclass(frozen=True, slots=True)
class StockRef:
    """カタログやウォッチリストで定義される銘柄情報。"""

    symbol: str
    name: str = ""
    sector: Optional[str] = None

    def as_dict(self) -> dict[str, str | None]:
        """UIやシリアライザ向けに辞書へ変換する。"""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "sector": self.sector,
        }


@dataclass(frozen=True, slots=True)
class PricePoint:
    """取得または合成された1日分の終値。"""

    date: date
    close: float


@dataclass(frozen=True, slots=True)
class DailyStat:
    """テーブル1セル分の価格と前日比。"""

    date: date
    price: float
    change_percent: float


@dataclass(slots=True)
class AnalysisRow:
    """単一銘柄の表示期間分の履歴。"""

    stock: StockRef
    history: Sequence[DailyStat] = field(default_factory=tuple)
    is_simulated: bool = False

    @property
    def symbol(self) -> str:
        return self.stock.symbol


HistoryMap = Dict[str, List[PricePoint]]


@dataclass(slots=True)
class ChunkResult:
    """リモート取得1チャンク分の結果。失敗時は history が空で error が入る。"""

    symbols: tuple[str, ...]
    history: HistoryMap = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class AnalysisResult:
    """1回の分析リクエストの集約結果。"""

    rows: Sequence[AnalysisRow] = field(default_factory=tuple)
    simulated: bool = False
    errors: Sequence[str] = field(default_factory=tuple)

    @property
    def dates(self) -> tuple[date, ...]:
        if not self.rows:
            return ()
        return tuple(stat.date for stat in self.rows[0].history)


@dataclass(frozen=True, slots=True)
class ChartRequest:
    """チャートウィジェットへ渡す描画要求。"""

    symbol: str
    interval: TimeFrame = TimeFrame.DAY

    @property
    def tv_symbol(self) -> str:
        return chart_symbol(self.symbol)
