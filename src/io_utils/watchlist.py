"""ユーザー入力のティッカー列をスキャン対象へ変換する。"""
from __future__ import annotations

from typing import Iterable, List, Sequence

from domain.catalog import EGX30
from domain.models import StockRef
from io_utils.markets import normalize_symbol


MAX_SYMBOLS = 40
DEFAULT_SECTOR = "General"


def stock_for_symbol(symbol: str) -> StockRef:
    """EGX30 カタログに載っていればそのメタデータを、なければ汎用名を付ける。"""
    for ref in EGX30:
        if ref.symbol == symbol:
            return ref
    return StockRef(symbol=symbol, name=f"{symbol} Stock", sector=DEFAULT_SECTOR)


def dedupe_symbols(raw_symbols: Iterable[str], limit: int = MAX_SYMBOLS) -> List[StockRef]:
    seen: set[str] = set()
    stocks: list[StockRef] = []
    for raw in raw_symbols:
        symbol = normalize_symbol(raw)
        if not symbol or symbol in seen:
            continue
        seen.add(symbol)
        stocks.append(stock_for_symbol(symbol))
    return stocks[: max(limit, 0)]


def parse_symbol_input(text: str, limit: int = MAX_SYMBOLS) -> List[StockRef]:
    """`COMI.CA; CIB; EFG` のようなセミコロン区切り入力を解析する。"""
    tokens = [token.strip() for token in (text or "").split(";")]
    return dedupe_symbols((t for t in tokens if t), limit=limit)


def filter_stocks(stocks: Sequence[StockRef], term: str) -> List[StockRef]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(stocks)
    return [
        s for s in stocks
        if needle in s.symbol.lower() or needle in (s.name or "").lower()
    ]
