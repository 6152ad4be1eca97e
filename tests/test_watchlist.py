from domain.models import StockRef
from io_utils.watchlist import filter_stocks, parse_symbol_input


def test_parse_symbol_input_normalizes_and_dedupes():
    stocks = parse_symbol_input("ABUK.CA; cib ;COMI.CA;; efg; NEWCO")

    assert [s.symbol for s in stocks] == ["ABUK", "COMI", "HRHO", "NEWCO"]
    assert stocks[1].name == "CIB Bank"
    assert stocks[3] == StockRef(symbol="NEWCO", name="NEWCO Stock", sector="General")


def test_parse_symbol_input_limits_count():
    text = ";".join(f"T{i}" for i in range(60))
    assert len(parse_symbol_input(text)) == 40
    assert len(parse_symbol_input(text, limit=5)) == 5


def test_parse_symbol_input_empty():
    assert parse_symbol_input("  ; ;") == []
    assert parse_symbol_input("") == []


def test_filter_stocks_matches_symbol_or_name():
    stocks = parse_symbol_input("COMI; HRHO; FWRY")
    assert [s.symbol for s in filter_stocks(stocks, "herm")] == ["HRHO"]
    assert [s.symbol for s in filter_stocks(stocks, "fw")] == ["FWRY"]
    assert filter_stocks(stocks, "  ") == stocks
