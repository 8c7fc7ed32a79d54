from __future__ import annotations

import httpx
import structlog

from .errors import AuthenticationError, UpstreamProtocolError
from .tiering import DEFAULT_TIER, ModelTier
from .upstream_session import UpstreamSession

log = structlog.get_logger()

GEMINI_DEV_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiSession(UpstreamSession):
    """Gemini Developer API (`generateContent`, api key in the query string)."""

    name = "Gemini"
    supports_tier = True

    def __init__(
        self,
        api_key: str | None,
        *,
        models: dict[ModelTier, str] | None = None,
        client: httpx.AsyncClient | None = None,
        base_url: str = GEMINI_DEV_API_BASE,
        timeout_seconds: float = 60,
    ):
        super().__init__(client=client, timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self._models = dict(models or {})
        self._base_url = base_url

    def model_for(self, tier: ModelTier | None) -> str:
        default = self._models.get(DEFAULT_TIER, GEMINI_DEFAULT_MODEL)
        if tier is None:
            return default
        return self._models.get(tier) or default

    async def generate(self, prompt: str, tier: ModelTier | None = None) -> str:
        if not self.api_key:
            raise AuthenticationError("Missing GEMINI_API_KEY for Gemini call.")

        model = self.model_for(tier)
        data = await self._post_json(
            f"{self._base_url}/models/{model}:generateContent",
            params={"key": self.api_key},
            payload={"contents": [{"parts": [{"text": prompt}]}]},
        )

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not isinstance(candidates, list) or not candidates:
            raise UpstreamProtocolError("Missing candidates in Gemini response.")

        candidate = candidates[0]
        content = candidate.get("content") if isinstance(candidate, dict) else None
        if not isinstance(content, dict):
            raise UpstreamProtocolError("Missing content in Gemini response.")

        parts = content.get("parts")
        if not isinstance(parts, list) or not parts:
            raise UpstreamProtocolError("Missing parts in Gemini response.")

        part = parts[0]
        text = part.get("text") if isinstance(part, dict) else None
        if not isinstance(text, str):
            raise UpstreamProtocolError("Missing text in Gemini response.")

        log.debug("gemini_generate_ok", model=model, prompt_chars=len(prompt))
        return text
