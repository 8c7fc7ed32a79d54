from __future__ import annotations

from typing import Any

import httpx
import structlog

from .errors import AuthenticationError, RateLimitError, UpstreamProtocolError
from .tiering import ModelTier

log = structlog.get_logger()

_BODY_EXCERPT_CHARS = 500


class UpstreamSession:
    """
    Shared HTTP plumbing for provider sessions.

    A session makes exactly one outbound call per `generate`; retrying and
    falling back are the dispatcher's job. Every non-2xx status becomes a typed
    error whose message carries the provider name and status code only. The
    response body is logged (truncated) and never placed in the exception.
    """

    name = "upstream"
    supports_tier = False

    def __init__(self, *, client: httpx.AsyncClient | None = None, timeout_seconds: float = 60):
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def generate(self, prompt: str, tier: ModelTier | None = None) -> str:
        raise NotImplementedError

    async def _post_json(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        try:
            resp = await self._client.post(url, headers=headers, params=params, json=payload)
        except httpx.TimeoutException as e:
            raise UpstreamProtocolError(f"{self.name} request timed out.") from e
        except httpx.HTTPError as e:
            raise UpstreamProtocolError(f"{self.name} request failed.") from e

        if resp.status_code >= 400:
            log.warning(
                "upstream_error_response",
                provider=self.name,
                status_code=resp.status_code,
                body=resp.text[:_BODY_EXCERPT_CHARS],
            )
            message = f"{self.name} error {resp.status_code}."
            if resp.status_code in (401, 403):
                raise AuthenticationError(message)
            if resp.status_code == 429:
                retry_after = resp.headers.get("retry-after")
                retry_seconds = int(retry_after) if retry_after and retry_after.isdigit() else None
                raise RateLimitError(retry_after_seconds=retry_seconds, message=message)
            raise UpstreamProtocolError(message)

        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamProtocolError(f"{self.name} returned a non-JSON body.") from e
