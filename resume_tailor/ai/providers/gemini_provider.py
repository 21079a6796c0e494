from __future__ import annotations

import os
from typing import Optional

from google import genai
from google.genai import types


class GeminiProvider:
    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        timeout_s: float = 60.0,
        temperature: float = 0.4,
    ):
        self._model = model
        self._temperature = temperature
        key = (api_key or os.getenv("GEMINI_API_KEY") or "").strip()
        if not key:
            raise RuntimeError("GEMINI_API_KEY is missing")

        self._client = genai.Client(
            api_key=key,
            http_options=types.HttpOptions(timeout=int(timeout_s * 1000)),
        )

    def generate(self, prompt: str) -> str:
        response = self._client.models.generate_content(
            model=self._model,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=self._temperature),
        )
        return response.text or ""
