from __future__ import annotations

from dataclasses import dataclass


@dataclass
class DashboardSettings:
    display_days: int = 15
    fallback_delay: float = 1.5
    max_symbols: int = 40
    chunk_size: int = 3
    sessions: int = 20
    model: str = "gemini-2.5-flash"
    api_key_env: str = "GEMINI_API_KEY"
    daily_quota: int = 1500
