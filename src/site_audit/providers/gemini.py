"""Google Gemini ``generateContent`` adapter (JSON response mode)."""

from __future__ import annotations

from typing import Optional

from ..exceptions import ProviderResponseInvalid
from .base import HttpProvider

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class GeminiProvider(HttpProvider):
    name = "gemini"

    async def complete(self, prompt: str) -> Optional[str]:
        key = self._require_key()
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        data = await self._post_json(
            GEMINI_API_URL.format(model=self.model),
            payload,
            headers={"x-goog-api-key": key},
        )
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderResponseInvalid(self.label, f"no candidate content ({e!r})") from e
        return "".join(part.get("text", "") for part in parts)
