"""Provider adapters and the role registry passed to analysers and synthesis."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

import httpx

from ..config import AuditConfig, ProviderKeys
from .anthropic_messages import AnthropicProvider
from .base import HttpProvider, StructuredProvider, parse_structured, schema_instructions
from .gemini import GeminiProvider
from .openai_chat import OpenAIProvider

ROLES = ("gemini", "gemini_fast", "openai", "openai_fast", "anthropic")


class ProviderSet:
    """Named provider roles, built once per process.

    Roles without a configured provider are simply absent; a fallback chain
    skips them instead of failing on a missing key.
    """

    def __init__(self, providers: Optional[Mapping[str, StructuredProvider]] = None):
        self._providers = dict(providers or {})

    @classmethod
    def from_config(
        cls,
        config: AuditConfig,
        keys: ProviderKeys,
        client: httpx.AsyncClient,
    ) -> "ProviderSet":
        if not config.use_ai:
            return cls()
        timeout = config.provider_timeout_seconds
        providers: dict[str, StructuredProvider] = {}
        if keys.gemini:
            providers["gemini"] = GeminiProvider(client, keys.gemini, config.gemini_model, timeout)
            providers["gemini_fast"] = GeminiProvider(client, keys.gemini, config.gemini_fast_model, timeout)
        if keys.openai:
            providers["openai"] = OpenAIProvider(client, keys.openai, config.openai_model, timeout)
            providers["openai_fast"] = OpenAIProvider(client, keys.openai, config.openai_fast_model, timeout)
        if keys.anthropic:
            providers["anthropic"] = AnthropicProvider(client, keys.anthropic, config.anthropic_model, timeout)
        return cls(providers)

    def get(self, role: str) -> Optional[StructuredProvider]:
        return self._providers.get(role)

    def chain(self, roles: Iterable[str]) -> list[tuple[str, StructuredProvider]]:
        """``(role, provider)`` pairs for the configured roles, in the given order."""
        return [(role, self._providers[role]) for role in roles if role in self._providers]

    @property
    def roles(self) -> list[str]:
        return list(self._providers)

    def __len__(self) -> int:
        return len(self._providers)


__all__ = [
    "ROLES",
    "ProviderSet",
    "StructuredProvider",
    "HttpProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "parse_structured",
    "schema_instructions",
]
