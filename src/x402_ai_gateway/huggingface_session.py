from __future__ import annotations

import httpx

from .errors import AuthenticationError, UpstreamProtocolError
from .tiering import ModelTier
from .upstream_session import UpstreamSession

HF_INFERENCE_API_BASE = "https://api-inference.huggingface.co/models"
HF_DEFAULT_MODEL = "mistralai/Mistral-7B-Instruct-v0.3"


class HuggingFaceSession(UpstreamSession):
    name = "HuggingFace"

    def __init__(
        self,
        token: str | None,
        *,
        model: str = HF_DEFAULT_MODEL,
        max_new_tokens: int = 500,
        client: httpx.AsyncClient | None = None,
        base_url: str = HF_INFERENCE_API_BASE,
        timeout_seconds: float = 60,
    ):
        super().__init__(client=client, timeout_seconds=timeout_seconds)
        self.token = token
        self.model = model
        self._max_new_tokens = max_new_tokens
        self._base_url = base_url

    async def generate(self, prompt: str, tier: ModelTier | None = None) -> str:
        # Single hosted model; tier is ignored.
        if not self.token:
            raise AuthenticationError("Missing HF_TOKEN for Hugging Face call.")

        data = await self._post_json(
            f"{self._base_url}/{self.model}",
            headers={"Authorization": f"Bearer {self.token}"},
            payload={"inputs": prompt, "parameters": {"max_new_tokens": self._max_new_tokens}},
        )

        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, dict):
            raise UpstreamProtocolError("Unexpected Hugging Face response shape.")
        text = data.get("generated_text")
        if not isinstance(text, str):
            raise UpstreamProtocolError("Missing generated_text in Hugging Face response.")
        return text
