"""検索グラウンディング付きテキスト生成の薄いラッパー。"""
from __future__ import annotations

import logging
import os
from typing import Optional, Protocol

from dotenv import load_dotenv
from google import genai
from google.genai import types

from domain.errors import app_error
from domain.settings import DashboardSettings

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    def generate(self, prompt: str, *, enable_search_grounding: bool = True) -> str:
        ...


class GeminiTextGenerator:
    """google-genai SDK で `generate_content` を呼び出す。"""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", client: genai.Client | None = None) -> None:
        self.model = model
        self._client = client or genai.Client(api_key=api_key)

    def generate(self, prompt: str, *, enable_search_grounding: bool = True) -> str:
        config = None
        if enable_search_grounding:
            config = types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())],
            )
        response = self._client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        text = response.text
        if not text:
            raise app_error("E-LLM-EMPTY", detail=self.model)
        return text


def generator_from_config(settings: DashboardSettings) -> Optional[GeminiTextGenerator]:
    """APIキーがあれば生成器を返す。無ければ None (= リモート取得不可)。"""
    load_dotenv()
    api_key = os.getenv(settings.api_key_env, "").strip()
    if not api_key:
        logger.warning("%s is not set; market history will be simulated", settings.api_key_env)
        return None
    return GeminiTextGenerator(api_key=api_key, model=settings.model)
