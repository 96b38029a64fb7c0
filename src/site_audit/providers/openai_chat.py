"""OpenAI chat completions adapter with ``json_object`` output."""

from __future__ import annotations

from typing import Optional

from ..exceptions import ProviderResponseInvalid
from .base import HttpProvider

OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIProvider(HttpProvider):
    name = "openai"

    async def complete(self, prompt: str) -> Optional[str]:
        key = self._require_key()
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": "You are a website audit expert. Reply in JSON."},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
        }
        data = await self._post_json(
            OPENAI_API_URL,
            payload,
            headers={"Authorization": f"Bearer {key}"},
        )
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderResponseInvalid(self.label, f"no message content ({e!r})") from e
