"""指数構成銘柄と概算価格の静的テーブル。"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from domain.errors import app_error
from domain.models import MarketIndex, StockRef


DEFAULT_SEED_PRICE = 10.0


def _refs(*rows: tuple[str, str, str]) -> tuple[StockRef, ...]:
    return tuple(StockRef(symbol=s, name=n, sector=sec) for s, n, sec in rows)


EGX30: tuple[StockRef, ...] = _refs(
    ("COMI", "CIB Bank", "Banking"),
    ("EAST", "Eastern Company", "Tobacco"),
    ("EFID", "Edita Food", "Food"),
    ("HRHO", "EFG Hermes", "Financial"),
    ("TMGH", "Talaat Moustafa", "Real Estate"),
    ("SWDY", "Elsewedy Electric", "Industrial"),
    ("ETEL", "Telecom Egypt", "Telecom"),
    ("ESRS", "Ezz Steel", "Resources"),
    ("FWRY", "Fawry", "Tech"),
    ("ORAS", "Orascom Const", "Construction"),
    ("HDBK", "HDBank", "Banking"),
    ("EKHO", "Egypt Kuwait", "Financial"),
    ("AMOC", "AMOC", "Energy"),
    ("ABUK", "Abu Qir", "Chemicals"),
    ("SKPC", "Sidi Kerir", "Chemicals"),
    ("ISPH", "Ibnsina Pharma", "Pharma"),
    ("CICH", "CI Capital", "Financial"),
    ("MFPC", "MOPCO", "Chemicals"),
    ("ORWE", "Oriental Weavers", "Textiles"),
    ("HELI", "Heliopolis", "Real Estate"),
    ("PHDC", "Palm Hills", "Real Estate"),
    ("ADIB", "Abu Dhabi Islamic", "Banking"),
    ("CIEB", "Credit Agricole", "Banking"),
    ("JUFO", "Juhayna", "Food"),
    ("EFIH", "e-finance", "Tech"),
    ("DOMT", "Domty", "Food"),
    ("ORHD", "Orascom Dev", "Real Estate"),
    ("AUTO", "GB Corp", "Auto"),
    ("CLHO", "Cleopatra Hosp", "Healthcare"),
    ("ZMID", "Zahraa Maadi", "Real Estate"),
)

EGX70: tuple[StockRef, ...] = _refs(
    ("MOIL", "Maridive", "Energy"),
    ("DSCW", "Dice Sport", "Textiles"),
    ("ASCM", "ASEC Mining", "Resources"),
    ("BINV", "B Investments", "Financial"),
    ("CSAG", "Canal Shipping", "Shipping"),
    ("EGTS", "Egyptian Resorts", "Tourism"),
    ("UEGC", "Upper Egypt", "Construction"),
    ("AJWA", "Ajwa", "Food"),
    ("ARAB", "Arab Developers", "Real Estate"),
    ("BTFH", "Belton", "Financial"),
    ("CCAP", "Citadel Capital", "Financial"),
    ("DAPH", "Delta Pharma", "Pharma"),
    ("EGAL", "Egypt Aluminum", "Resources"),
    ("ELSH", "Al Shams", "Real Estate"),
    ("GTHE", "Global Telecom", "Telecom"),
    ("UNIT", "United Housing", "Real Estate"),
    ("RACC", "Raya", "Tech"),
    ("MPRC", "Media Prod", "Media"),
    ("ACAMD", "Arab Co", "Health"),
    ("ODOD", "Odin", "Financial"),
)

# フォールバック合成の種値。実勢価格ではなく 2024-2025 年の典型レンジ。
APPROX_PRICES: Mapping[str, float] = MappingProxyType(
    {
        "COMI": 82.50, "EAST": 29.00, "EFID": 26.50, "HRHO": 19.50, "TMGH": 58.00,
        "SWDY": 46.50, "ETEL": 35.00, "ESRS": 60.00, "FWRY": 6.80, "ORAS": 185.00,
        "AMOC": 11.20, "ABUK": 62.00, "SKPC": 29.50, "MFPC": 49.50, "ADIB": 48.00,
        "CCAP": 2.30, "BTFH": 3.60, "EGAL": 68.00, "ISPH": 3.10, "PHDC": 4.20,
        "HELI": 12.50, "ORWE": 18.00, "CIEB": 22.00, "AUTO": 7.50, "EKHO": 42.00,
    }
)

_INDEX_MEMBERS: Mapping[MarketIndex, tuple[StockRef, ...]] = MappingProxyType(
    {
        MarketIndex.EGX30: EGX30,
        MarketIndex.EGX70: EGX70,
    }
)


def index_members(index: MarketIndex | str) -> tuple[StockRef, ...]:
    """指数名から静的な構成銘柄リストを返す。"""
    try:
        key = MarketIndex(str(getattr(index, "value", index)).upper())
    except ValueError as exc:
        raise app_error("E-INDEX-NOTFOUND", detail=str(index)) from exc
    return _INDEX_MEMBERS[key]


def lookup_stock(symbol: str) -> Optional[StockRef]:
    for ref in EGX30 + EGX70:
        if ref.symbol == symbol:
            return ref
    return None


def approx_price(symbol: str) -> Optional[float]:
    return APPROX_PRICES.get(symbol)
