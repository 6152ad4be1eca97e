"""シンボル正規化とチャート向け表記のヘルパー。"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping


EXCHANGE_PREFIX = "EGX"
_MARKET_SUFFIX = ".CA"
_NON_ALNUM = re.compile(r"[^A-Z0-9]")

# 社名や旧ティッカーからチャートで通用するティッカーへの対応表。
# キーは英数字以外を除去した後の形で持つ。
TICKER_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "CIB": "COMI",
        "COMMERCIALINTERNATIONALBANK": "COMI",
        "EFG": "HRHO",
        "HERMES": "HRHO",
        "EFGHERMES": "HRHO",
        "EASTERN": "EAST",
        "TALAAT": "TMGH",
        "ELSEWEDY": "SWDY",
        "TELECOM": "ETEL",
        "EZZ": "ESRS",
        "ABUQIR": "ABUK",
        "MOPCO": "MFPC",
        "CIEB": "CIEB",
        "QNB": "QNBA",
        "ACGC": "ACGC",
        "EGAL": "EGAL",
        "CITADEL": "CCAP",
        "BELTON": "BTFH",
    }
)


def normalize_symbol(raw: str) -> str:
    """入力ティッカーを内部シンボルへ正規化する。

    - 前後の空白を削除して大文字化
    - 末尾の `.CA` サフィックスを除去
    - 英数字以外を除去
    - 別名表にあれば正式ティッカーへ置換

    失敗しない。空文字が返った場合は呼び出し側で破棄すること。
    """
    cleaned = (raw or "").strip().upper()
    if cleaned.endswith(_MARKET_SUFFIX):
        cleaned = cleaned[: -len(_MARKET_SUFFIX)]
    cleaned = _NON_ALNUM.sub("", cleaned)
    return TICKER_ALIASES.get(cleaned, cleaned)


def strip_exchange_prefix(raw: str) -> str:
    """`EGX:COMI` のような取引所プレフィックスを外す。"""
    text = (raw or "").strip()
    if ":" in text:
        return text.split(":", 1)[1]
    return text


def chart_symbol(symbol: str) -> str:
    """チャートウィジェット用の `EGX:XXXX` 表記を返す。"""
    cleaned = (symbol or "").strip()
    if ":" in cleaned:
        return cleaned
    return f"{EXCHANGE_PREFIX}:{cleaned}"
