"""LLM+検索で終値履歴をチャンク単位に取得するサービス。"""
from __future__ import annotations

import json
import logging
import math
import re
from datetime import date, datetime
from typing import Any, Iterable, Iterator, Sequence

import pandas as pd

from domain.errors import app_error, ensure_app_error
from domain.models import ChunkResult, HistoryMap, PricePoint
from io_utils.markets import EXCHANGE_PREFIX, normalize_symbol, strip_exchange_prefix
from services.llm_client import TextGenerator
from services.usage_meter import UsageMeter, usage_meter

logger = logging.getLogger(__name__)

_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)
_CODE_FENCE = re.compile(r"```(?:json)?")

_HISTORY_PROMPT = """
Find the historical DAILY CLOSING PRICES for the last {sessions} COMPLETED trading sessions for these EGX stocks: {symbols}.
Do not include "Today" if the market is still open. Start from the last fully closed session.
Source from TradingView, Investing.com, or official EGX data.

Return a JSON array of objects. Each object should be:
{{
  "symbol": "STOCK_SYMBOL",
  "data": [
     {{ "date": "YYYY-MM-DD", "close": 12.50 }},
     {{ "date": "YYYY-MM-DD", "close": 12.60 }}
     ...
  ]
}}
Ensure the "close" is a number. Sort dates descending (newest first).
IMPORTANT: Return raw JSON only.
"""


def chunked(items: Sequence[str], size: int) -> Iterator[tuple[str, ...]]:
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield tuple(items[start:start + size])


def extract_json_array(text: str) -> Any:
    """応答テキストから最初の `[` から最後の `]` までを JSON として読む。"""
    match = _JSON_ARRAY.search(text or "")
    candidate = match.group(0) if match else _CODE_FENCE.sub("", text or "").strip()
    return json.loads(candidate)


def _as_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip().replace("/", "-")
    if not text:
        return None
    try:
        stamp = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(stamp):
        return None
    return stamp.date()


def _as_close(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        close = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(close) or close <= 0:
        return None
    return close


def parse_points(data: Iterable[Any]) -> list[PricePoint]:
    """不正な終値を除外し、日付降順・日付重複なしに整える。"""
    by_date: dict[date, PricePoint] = {}
    for entry in data:
        if not isinstance(entry, dict):
            continue
        day = _as_date(entry.get("date"))
        close = _as_close(entry.get("close"))
        if day is None or close is None or day in by_date:
            continue
        by_date[day] = PricePoint(date=day, close=close)
    return sorted(by_date.values(), key=lambda p: p.date, reverse=True)


def parse_history_payload(payload: Any) -> HistoryMap:
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
    history: HistoryMap = {}
    for item in payload:
        if not isinstance(item, dict):
            continue
        symbol = normalize_symbol(strip_exchange_prefix(str(item.get("symbol") or "")))
        data = item.get("data")
        if not symbol or not isinstance(data, list):
            continue
        history[symbol] = parse_points(data)
    return history


def merge_chunks(results: Iterable[ChunkResult]) -> HistoryMap:
    """同じ銘柄が複数チャンクに現れた場合は後のチャンクを採用する。"""
    merged: HistoryMap = {}
    for result in results:
        merged.update(result.history)
    return merged


class HistoryRetriever:
    """銘柄集合を小さなチャンクに分け、逐次リモート取得する。

    1チャンクの失敗は他チャンクへ波及させない。失敗チャンクの銘柄は
    単にデータなしとして扱われ、`ChunkResult.error` に理由が残る。
    """

    def __init__(
        self,
        generator: TextGenerator,
        meter: UsageMeter | None = None,
        *,
        chunk_size: int = 3,
        sessions: int = 20,
    ) -> None:
        self.generator = generator
        self.meter = meter or usage_meter
        self.chunk_size = chunk_size
        self.sessions = sessions

    def retrieve(self, symbols: Iterable[str]) -> HistoryMap:
        return merge_chunks(self.retrieve_chunks(symbols))

    def retrieve_chunks(self, symbols: Iterable[str]) -> tuple[ChunkResult, ...]:
        """チャンクごとの結果を返す。インスタンスには状態を残さない。"""
        ordered = sorted({s for s in symbols if s})
        results = tuple(self.fetch_chunk(chunk) for chunk in chunked(ordered, self.chunk_size))
        failed = sum(1 for r in results if not r.ok)
        logger.info(
            "Retrieved history for %d/%d symbols (%d failed chunks)",
            len(merge_chunks(results)),
            len(ordered),
            failed,
        )
        return results

    def fetch_chunk(self, chunk: tuple[str, ...]) -> ChunkResult:
        prompt = self.build_prompt(chunk)
        self.meter.increment()
        try:
            text = self.generator.generate(prompt, enable_search_grounding=True)
        except Exception as exc:
            err = ensure_app_error(exc, code="E-LLM-CHUNK").with_symbol(",".join(chunk))
            logger.warning("History chunk fetch failed: %s", err.for_log())
            return ChunkResult(symbols=chunk, error=str(err))
        try:
            history = parse_history_payload(extract_json_array(text))
        # 巨大な整数や深すぎる入れ子もこのチャンクだけの不正応答として扱う
        except (ValueError, TypeError, OverflowError, RecursionError) as exc:
            err = app_error("E-LLM-MALFORMED", detail=str(exc) or None, symbol=",".join(chunk))
            logger.warning("History chunk parse failed: %s", err.for_log())
            return ChunkResult(symbols=chunk, error=str(err))
        return ChunkResult(symbols=chunk, history=history)

    def build_prompt(self, chunk: Sequence[str]) -> str:
        symbols = ", ".join(f"{EXCHANGE_PREFIX}:{s}" for s in chunk)
        return _HISTORY_PROMPT.format(sessions=self.sessions, symbols=symbols)
