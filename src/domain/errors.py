"""アプリ全体で共通利用するエラー定義。"""
from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml


_SUPPORT_DOC = "README.md"


DEFAULT_ERROR_CATALOG: Mapping[str, dict[str, str]] = {
    "E-CSV-NOTFOUND": {
        "message": "CSVファイルが見つかりません。",
        "guidance": "ファイルパスとアクセス権を確認し、必要に応じてフルパスを指定してください。",
        "support_url": _SUPPORT_DOC,
    },
    "E-CSV-ENCODING": {
        "message": "CSVを読み込めませんでした。",
        "guidance": "UTF-8 (BOM 可) 形式で保存されているか確認してください。",
        "support_url": _SUPPORT_DOC,
    },
    "E-CSV-EMPTY": {
        "message": "CSVに有効なティッカーがありません。",
        "guidance": "ヘッダー行とティッカー列が含まれているか確認してください。",
        "support_url": _SUPPORT_DOC,
    },
    "E-CSV-UNKNOWN": {
        "message": "CSVの読み込みに失敗しました。",
        "guidance": "フォーマットとファイルの整合性を確認してください。",
        "support_url": _SUPPORT_DOC,
    },
    "E-INDEX-NOTFOUND": {
        "message": "指定した指数が存在しません。",
        "guidance": "EGX30 または EGX70 を指定してください。",
        "support_url": _SUPPORT_DOC,
    },
    "E-LLM-CHUNK": {
        "message": "価格履歴の取得に失敗しました。",
        "guidance": "該当銘柄は推定値で補完されます。時間をおいて再取得してください。",
        "support_url": "https://ai.google.dev/gemini-api/docs",
    },
    "E-LLM-MALFORMED": {
        "message": "価格履歴の応答を解析できませんでした。",
        "guidance": "モデル応答にJSON配列が含まれていません。該当銘柄は推定値で補完されます。",
        "support_url": "https://ai.google.dev/gemini-api/docs",
    },
    "E-LLM-EMPTY": {
        "message": "モデルから空の応答が返されました。",
        "guidance": "API の利用上限やモデル名の設定を確認してください。",
        "support_url": "https://ai.google.dev/gemini-api/docs",
    },
    "E-LLM-UNAVAILABLE": {
        "message": "価格履歴の取得機能を利用できません。",
        "guidance": "APIキー (GEMINI_API_KEY) が設定されているか確認してください。表示中のデータはシミュレーションです。",
        "support_url": "https://ai.google.dev/gemini-api/docs/api-key",
    },
    "E-UNEXPECTED": {
        "message": "予期しないエラーが発生しました。",
        "guidance": "ログを確認し、再実行しても改善しない場合は開発者に問い合わせてください。",
        "support_url": _SUPPORT_DOC,
    },
}


@lru_cache()
def _load_support_links(config_path: Path = Path("config.yaml")) -> dict[str, str]:
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except Exception:
        return {}
    links = data.get("support_links")
    return {str(k): str(v) for k, v in links.items()} if isinstance(links, dict) else {}


@lru_cache()
def _load_error_support_map(config_path: Path = Path("config.yaml")) -> dict[str, str]:
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except Exception:
        return {}
    app_cfg = data.get("app")
    mapping = app_cfg.get("error_support") if isinstance(app_cfg, dict) else None
    return {str(k): str(v) for k, v in mapping.items()} if isinstance(mapping, dict) else {}


@dataclass
class AppError(Exception):
    """コード付きのアプリケーションエラー。"""

    code: str
    user_message: str | None = None
    detail: str | None = None
    symbol: str | None = None
    payload: dict[str, Any] | None = None
    guidance: str | None = None
    support_url: str | None = None

    def __post_init__(self) -> None:
        meta = DEFAULT_ERROR_CATALOG.get(self.code, {})
        if not self.user_message:
            self.user_message = meta.get("message", "エラーが発生しました。")
        if self.guidance is None:
            self.guidance = meta.get("guidance")
        if self.support_url is None:
            self.support_url = _resolve_support_url(self.code, meta.get("support_url"))

    def __str__(self) -> str:
        message = self.user_message or "エラーが発生しました。"
        base = f"[{self.code}] {message}"
        if self.symbol:
            base = f"{self.symbol}: {base}"
        if self.detail:
            return f"{base} ({self.detail})"
        return base

    def for_log(self) -> str:
        base = str(self)
        if self.payload:
            return f"{base} | payload={self.payload}"
        return base

    def with_symbol(self, symbol: str) -> "AppError":
        return replace(self, symbol=symbol)

    def ui_body(self) -> str:
        parts: list[str] = []
        if self.guidance:
            parts.append(self.guidance)
        if self.support_url:
            parts.append(f"サポート: {self.support_url}")
        if self.detail:
            parts.append(f"詳細情報: {self.detail}")
        return "\n".join(parts)


@dataclass
class TotalRetrievalUnavailable(AppError):
    """リモート取得経路全体が使えないことを示す。全銘柄シミュレーションへ切り替える合図。"""

    code: str = "E-LLM-UNAVAILABLE"


def app_error(code: str, **kwargs: Any) -> AppError:
    """カタログに基づき AppError を生成する。"""

    return AppError(code=code, **kwargs)


def ensure_app_error(
    exc: Exception,
    *,
    code: str = "E-UNEXPECTED",
    message: str | None = None,
    symbol: str | None = None,
) -> AppError:
    """任意の例外を AppError へ正規化する。"""

    if isinstance(exc, AppError):
        return exc
    info = DEFAULT_ERROR_CATALOG.get(code, {})
    user_message = message or info.get("message", "予期しないエラーが発生しました。")
    return AppError(
        code=code,
        user_message=user_message,
        detail=str(exc) or None,
        symbol=symbol,
        guidance=info.get("guidance"),
        support_url=_resolve_support_url(code, info.get("support_url")),
    )


def _resolve_support_url(code: str, default_url: str | None) -> str | None:
    mapping = _load_error_support_map()
    links = _load_support_links()
    ref = mapping.get(code)
    if ref:
        return links.get(ref, default_url)
    return default_url
