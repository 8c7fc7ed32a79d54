from __future__ import annotations

from typing import Any

import httpx
import structlog

from .errors import AuthenticationError, UpstreamProtocolError
from .tiering import DEFAULT_TIER, ModelTier
from .upstream_session import UpstreamSession

log = structlog.get_logger()

OPENROUTER_API_BASE = "https://openrouter.ai/api/v1"
OPENROUTER_DEFAULT_MODEL = "openrouter/free"


class OpenRouterSession(UpstreamSession):
    """OpenAI-compatible chat completions on OpenRouter; the tier picks the model."""

    name = "OpenRouter"
    supports_tier = True

    def __init__(
        self,
        api_key: str | None,
        *,
        models: dict[ModelTier, str] | None = None,
        max_tokens: int = 1000,
        client: httpx.AsyncClient | None = None,
        base_url: str = OPENROUTER_API_BASE,
        timeout_seconds: float = 60,
    ):
        super().__init__(client=client, timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self._models = dict(models or {})
        self._max_tokens = max_tokens
        self._base_url = base_url

    def model_for(self, tier: ModelTier | None) -> str:
        default = self._models.get(DEFAULT_TIER, OPENROUTER_DEFAULT_MODEL)
        if tier is None:
            return default
        return self._models.get(tier) or default

    async def generate(self, prompt: str, tier: ModelTier | None = None) -> str:
        if not self.api_key:
            raise AuthenticationError("Missing OPENROUTER_API_KEY for OpenRouter call.")

        model = self.model_for(tier)
        payload: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self._max_tokens,
        }
        data = await self._post_json(
            f"{self._base_url}/chat/completions",
            payload=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices:
            raise UpstreamProtocolError("Missing choices in OpenRouter response.")
        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise UpstreamProtocolError("Missing message in OpenRouter response.")
        text = message.get("content")
        if not isinstance(text, str):
            raise UpstreamProtocolError("Missing content in OpenRouter response.")

        log.debug("openrouter_generate_ok", model=model, prompt_chars=len(prompt))
        return text
