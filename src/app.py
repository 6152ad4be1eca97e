from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

import pandas as pd

from domain.errors import AppError
from domain.models import AnalysisResult, ChartRequest, MarketIndex, StockRef, TimeFrame
from export.exporter import analysis_frame, export_table
from io_utils.csv_loader import load_symbols
from io_utils.watchlist import parse_symbol_input
from services.analyzer import AnalyzerService
from services.history_retriever import HistoryRetriever
from services.index_service import IndexService
from services.llm_client import generator_from_config
from services.logging_setup import configure_logging
from services.settings import settings_from_config
from services.usage_meter import usage_meter

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="EGX-Trends 日次価格・騰落率スキャナー")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--symbols", help="セミコロン区切りのティッカー (例: 'COMI.CA; CIB; EFG')", default=None)
    source.add_argument("--csv", type=Path, help="ウォッチリストCSV", default=None)
    source.add_argument(
        "--index",
        choices=[idx.value for idx in MarketIndex],
        default=MarketIndex.EGX30.value,
        help="分析対象の指数 (既定: EGX30)",
    )
    parser.add_argument("--days", type=int, default=None, help="表示する取引日数")
    parser.add_argument(
        "--interval",
        choices=[tf.value for tf in TimeFrame],
        default=TimeFrame.DAY.value,
        help="チャートの足種",
    )
    parser.add_argument("--export", type=str, default=None, help="結果の出力先 (.csv/.xlsx/.json)")
    parser.add_argument("--refresh-index", action="store_true", help="指数構成銘柄を再取得する")
    parser.add_argument("--config", type=Path, default=Path("config.yaml"))
    return parser.parse_args(argv)


def resolve_stocks(args: argparse.Namespace, index_service: IndexService, limit: int) -> list[StockRef]:
    if args.symbols:
        return parse_symbol_input(args.symbols, limit=limit)
    if args.csv:
        return load_symbols(args.csv)[:limit]
    return index_service.load(args.index, force_refresh=args.refresh_index)


def render(result: AnalysisResult) -> str:
    frame = analysis_frame(result.rows)
    if frame.empty:
        return "(no rows)"
    price_cols = [c for c in frame.columns if c.startswith("price:")]
    table = frame.set_index("symbol")[price_cols]
    table.columns = [c.split(":", 1)[1][5:] for c in price_cols]
    with pd.option_context("display.max_columns", None, "display.width", 200):
        return table.to_string()


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.config)
    settings = settings_from_config(args.config)

    generator = generator_from_config(settings)
    retriever = (
        HistoryRetriever(generator, usage_meter, chunk_size=settings.chunk_size, sessions=settings.sessions)
        if generator is not None
        else None
    )
    analyzer = AnalyzerService(retriever=retriever, settings=settings)
    index_service = IndexService(generator=generator, meter=usage_meter)

    try:
        stocks = resolve_stocks(args, index_service, settings.max_symbols)
    except AppError as err:
        logger.error(err.for_log())
        print(str(err))
        print(err.ui_body())
        return 1
    if not stocks:
        print("有効なティッカーがありません。")
        return 1

    if args.symbols or args.csv:
        interval = TimeFrame(args.interval)
        for stock in stocks:
            print(f"chart: {ChartRequest(stock.symbol, interval).tv_symbol} [{interval.value}]")

    result = analyzer.analyze_stocks(stocks, args.days)
    if result.simulated:
        print("※ ライブデータを取得できなかったため、表示中の値はシミュレーションです。")
    print(render(result))
    print(f"API usage: {usage_meter.count}/{settings.daily_quota}")

    if args.export:
        export_table(analysis_frame(result.rows), args.export)
        logger.info("Exported %d rows to %s", len(result.rows), args.export)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
