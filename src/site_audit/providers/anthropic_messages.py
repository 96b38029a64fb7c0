"""Anthropic messages API adapter. JSON is read from the text blocks."""

from __future__ import annotations

from typing import Optional

from ..exceptions import ProviderResponseInvalid
from .base import HttpProvider

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(HttpProvider):
    name = "anthropic"
    max_tokens = 4096

    async def complete(self, prompt: str) -> Optional[str]:
        key = self._require_key()
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        data = await self._post_json(
            ANTHROPIC_API_URL,
            payload,
            headers={"x-api-key": key, "anthropic-version": ANTHROPIC_VERSION},
        )
        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            raise ProviderResponseInvalid(self.label, "no content blocks")
        return "".join(b.get("text", "") for b in blocks if b.get("type") == "text")
