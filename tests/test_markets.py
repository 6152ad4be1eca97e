import pytest

from io_utils.markets import chart_symbol, normalize_symbol, strip_exchange_prefix


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("comi.ca", "COMI"),
        ("CIB", "COMI"),
        ("  efg hermes ", "HRHO"),
        ("Commercial International Bank", "COMI"),
        ("abuk.CA", "ABUK"),
        ("ORAS-", "ORAS"),
        ("", ""),
        ("  .ca ", ""),
        (None, ""),
    ],
)
def test_normalize_symbol(raw, expected):
    assert normalize_symbol(raw) == expected


@pytest.mark.parametrize("raw", ["comi.ca", "x.ca.ca", "EGX:COMI", "belton", "q n b", "12ab$", "CIEB"])
def test_normalize_symbol_is_idempotent(raw):
    once = normalize_symbol(raw)
    assert normalize_symbol(once) == once


def test_strip_exchange_prefix():
    assert strip_exchange_prefix("EGX:COMI") == "COMI"
    assert strip_exchange_prefix(" HRHO ") == "HRHO"


def test_chart_symbol_adds_exchange_once():
    assert chart_symbol("COMI") == "EGX:COMI"
    assert chart_symbol("EGX:COMI") == "EGX:COMI"
