"""ウォッチリストCSVを読み込むためのユーティリティ。"""
from __future__ import annotations

from pathlib import Path
from typing import List
import csv
import re

from domain.models import StockRef
from domain.errors import app_error
from io_utils.markets import normalize_symbol, strip_exchange_prefix
from io_utils.watchlist import stock_for_symbol

TICKER_RE = re.compile(r"^[A-Za-z0-9\.\-_:]+$")
_SYMBOL_HEADERS = ("ticker", "symbol")


def _has_header(first_row: list[str]) -> bool:
    if not first_row:
        return False
    headers = [(s or "").strip().lower() for s in first_row]
    if any(h in _SYMBOL_HEADERS for h in headers):
        return True
    if TICKER_RE.match((first_row[0] or "").strip()):
        return False
    return True


def _record(symbol: str, name: str = "", sector: str = "") -> StockRef | None:
    normalized = normalize_symbol(strip_exchange_prefix(symbol))
    if not normalized:
        return None
    if not name.strip():
        return stock_for_symbol(normalized)
    return StockRef(
        symbol=normalized,
        name=name.strip(),
        sector=sector.strip() or None,
    )


def load_symbols(path: Path) -> List[StockRef]:
    """CSVを読み込み `StockRef` のリストとして返す。重複シンボルは先勝ち。"""
    rows: list[StockRef] = []
    try:
        fh = path.open("r", encoding="utf-8-sig", newline="")
    except FileNotFoundError as exc:
        raise app_error("E-CSV-NOTFOUND", detail=str(exc)) from exc

    seen: set[str] = set()

    def _append(record: StockRef | None) -> None:
        if record is None or record.symbol in seen:
            return
        seen.add(record.symbol)
        rows.append(record)

    try:
        with fh as f:
            rdr = csv.reader(f)
            first = next(rdr, None)
            if first is None:
                raise app_error("E-CSV-EMPTY")
            header = _has_header(first)
            if header:
                cols = [(c or "").strip().lower() for c in first]
                idx_sym = next((i for i, c in enumerate(cols) if c in _SYMBOL_HEADERS), 0)
                idx_name = next((i for i, c in enumerate(cols) if c == "name"), None)
                idx_sec = next((i for i, c in enumerate(cols) if c == "sector"), None)
            else:
                idx_sym, idx_name, idx_sec = 0, 1, 2
                if first and first[0]:
                    _append(
                        _record(
                            first[0],
                            first[1] if len(first) > 1 else "",
                            first[2] if len(first) > 2 else "",
                        )
                    )
            for row in rdr:
                sym = (row[idx_sym] if len(row) > idx_sym else "").strip()
                name = row[idx_name].strip() if (idx_name is not None and len(row) > idx_name) else ""
                sec = row[idx_sec].strip() if (idx_sec is not None and len(row) > idx_sec) else ""
                if not sym:
                    continue
                _append(_record(sym, name, sec))
    except UnicodeDecodeError as exc:
        raise app_error("E-CSV-ENCODING", detail=str(exc)) from exc
    if not rows:
        raise app_error("E-CSV-EMPTY")
    return rows
