"""EGX 指数の構成銘柄リストを管理するサービス。"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import ClassVar, Dict, Optional

from domain.catalog import index_members
from domain.models import MarketIndex, StockRef
from io_utils.markets import normalize_symbol, strip_exchange_prefix
from services.history_retriever import extract_json_array
from services.llm_client import TextGenerator
from services.usage_meter import UsageMeter, usage_meter

logger = logging.getLogger(__name__)

MIN_MEMBERS = 10

_LIST_PROMPT = (
    "List the top {size} companies in the {index} index (Egyptian Exchange). "
    "Return a raw JSON array of objects with 'symbol', 'name' and 'sector'. "
    "IMPORTANT: The 'symbol' must be the specific TradingView Ticker "
    "(e.g. use 'COMI' for CIB, 'HRHO' for EFG Hermes, 'TMGH' for Talaat Moustafa). "
    "Do not use aliases. Do not use markdown blocks."
)


@dataclass
class IndexService:
    generator: Optional[TextGenerator] = None
    meter: UsageMeter = field(default_factory=lambda: usage_meter)

    # セッション中の再取得を避けるためのプロセス共通キャッシュ
    _CACHE: ClassVar[Dict[MarketIndex, tuple[StockRef, ...]]] = {}
    _CACHE_LOCK: ClassVar[Lock] = Lock()

    def list_indices(self) -> list[str]:
        return [idx.value for idx in MarketIndex]

    def load(self, index: MarketIndex | str, force_refresh: bool = False) -> list[StockRef]:
        fallback = index_members(index)
        key = MarketIndex(str(getattr(index, "value", index)).upper())
        if not force_refresh:
            with self._CACHE_LOCK:
                cached = self._CACHE.get(key)
            if cached:
                return list(cached)
        stocks = self._fetch(key) or fallback
        with self._CACHE_LOCK:
            self._CACHE[key] = tuple(stocks)
        return list(stocks)

    def refresh(self, index: MarketIndex | str) -> list[StockRef]:
        return self.load(index, force_refresh=True)

    @classmethod
    def clear_cache(cls) -> None:
        with cls._CACHE_LOCK:
            cls._CACHE.clear()

    # ------------------------------------------------------------------
    def _fetch(self, index: MarketIndex) -> tuple[StockRef, ...] | None:
        if self.generator is None:
            return None
        size = len(index_members(index))
        self.meter.increment()
        try:
            text = self.generator.generate(
                _LIST_PROMPT.format(size=size, index=index.value),
                enable_search_grounding=True,
            )
            payload = extract_json_array(text)
        except Exception:
            logger.warning("Using fallback list for %s due to fetch error", index.value, exc_info=True)
            return None
        if not isinstance(payload, list) or len(payload) < MIN_MEMBERS:
            logger.warning("Using fallback list for %s: insufficient data", index.value)
            return None

        stocks: list[StockRef] = []
        seen: set[str] = set()
        for item in payload:
            if not isinstance(item, dict):
                continue
            symbol = normalize_symbol(strip_exchange_prefix(str(item.get("symbol") or "")))
            if not symbol or symbol in seen:
                continue
            seen.add(symbol)
            sector = item.get("sector")
            stocks.append(
                StockRef(
                    symbol=symbol,
                    name=str(item.get("name") or symbol).strip(),
                    sector=str(sector).strip() if sector else None,
                )
            )
        if len(stocks) < MIN_MEMBERS:
            logger.warning("Using fallback list for %s: insufficient data", index.value)
            return None
        return tuple(stocks)
