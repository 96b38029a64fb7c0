"""Structured-output provider interface and shared HTTP plumbing."""

from __future__ import annotations

import json
import re
from typing import Any, Optional, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..exceptions import ProviderError, ProviderResponseInvalid

M = TypeVar("M", bound=BaseModel)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class StructuredProvider(Protocol):
    """Anything that turns a prompt into an instance of ``schema``."""

    name: str

    async def call(self, prompt: str, schema: type[M]) -> M: ...


def schema_instructions(schema: type[BaseModel]) -> str:
    """Appendix telling the model which JSON shape to return."""
    return (
        "Respond with a single JSON object only, no prose, matching this JSON schema:\n"
        + json.dumps(schema.model_json_schema(by_alias=True), sort_keys=True)
    )


def parse_structured(provider: str, text: Optional[str], schema: type[M]) -> M:
    """Validate raw model output against ``schema``.

    Raises:
        ProviderResponseInvalid: empty text, bad JSON or schema mismatch
    """
    if not text or not text.strip():
        raise ProviderResponseInvalid(provider, "empty response")
    text = text.strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        return schema.model_validate_json(text)
    except ValidationError as e:
        raise ProviderResponseInvalid(provider, f"{e.error_count()} validation errors") from e
    except ValueError as e:
        raise ProviderResponseInvalid(provider, str(e)) from e


class HttpProvider:
    """Base for REST adapters sharing one ``httpx.AsyncClient``."""

    name = "provider"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str],
        model: str,
        timeout_seconds: Optional[float] = None,
    ):
        self.client = client
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds

    @property
    def label(self) -> str:
        return f"{self.name}:{self.model}"

    def _require_key(self) -> str:
        if not self.api_key:
            raise ProviderError(self.name, "API key not configured")
        return self.api_key

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        try:
            response = await self.client.post(
                url,
                json=payload,
                headers=headers,
                params=params,
                timeout=self.timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"{type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            raise ProviderError(
                self.name,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ProviderResponseInvalid(self.name, "response body is not JSON") from e

    async def call(self, prompt: str, schema: type[M]) -> M:
        text = await self.complete(f"{prompt}\n\n{schema_instructions(schema)}")
        return parse_structured(self.label, text, schema)

    async def complete(self, prompt: str) -> Optional[str]:
        raise NotImplementedError
