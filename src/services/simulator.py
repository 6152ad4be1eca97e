"""リモート取得が全滅したときの全銘柄シミュレーション。"""
from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

import numpy as np

from domain.catalog import approx_price
from domain.models import AnalysisRow, DailyStat, StockRef

# 1日あたりの騰落率レンジ (±%)
DAILY_CHANGE_RANGE = 2.0
# 概算価格が無い銘柄の初期値レンジ
SEED_RANGE = (10.0, 60.0)


def simulate_row(stock: StockRef, display_dates: Sequence[date], rng: np.random.Generator) -> AnalysisRow:
    """表示日 (新しい順) に対し、古い日から順にランダムウォークで価格を進める。"""
    seed = approx_price(stock.symbol)
    price = seed if seed is not None else float(rng.uniform(*SEED_RANGE))
    stats: list[DailyStat] = []
    for day in reversed(display_dates):
        change = float(rng.uniform(-DAILY_CHANGE_RANGE, DAILY_CHANGE_RANGE))
        price = price * (1 + change / 100)
        stats.append(DailyStat(date=day, price=round(price, 2), change_percent=round(change, 2)))
    stats.reverse()
    return AnalysisRow(stock=stock, history=tuple(stats), is_simulated=True)


def simulate_all(
    stocks: Iterable[StockRef],
    display_dates: Sequence[date],
    rng: np.random.Generator | None = None,
) -> list[AnalysisRow]:
    rng = rng if rng is not None else np.random.default_rng()
    return [simulate_row(stock, display_dates, rng) for stock in stocks]
