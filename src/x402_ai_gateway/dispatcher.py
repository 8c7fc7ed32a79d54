from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from typing import Any

import structlog

from .errors import AllProvidersFailedError, ConfigurationError, EmptyResponseError, RequestTimeoutError
from .metrics import dispatch_exhausted_total, provider_attempts_total, provider_latency_seconds
from .router_contracts import AIResult, PromptRequest, Provider
from .tiering import ModelTier, resolve_tier

log = structlog.get_logger()


class FailoverDispatcher:
    """
    Walks a fixed, ordered provider chain and returns the first non-empty answer.

    Only the primary (first) provider sees the requested tier; fallbacks run
    their default model. A provider that raises, exceeds its deadline, or
    answers with blank text is logged and skipped. It is never retried. When
    the whole chain fails, a single `AllProvidersFailedError` is raised with
    no per-provider detail.
    """

    def __init__(
        self,
        chain: Sequence[Provider],
        *,
        provider_timeout_seconds: float | None = None,
        logger: Any = None,
        clock: Callable[[], float] | None = None,
    ):
        if not chain:
            raise ConfigurationError("Provider chain must contain at least one provider.")
        self._chain: tuple[Provider, ...] = tuple(chain)
        self._provider_timeout = provider_timeout_seconds if provider_timeout_seconds else None
        self._log = logger or log
        self._clock: Callable[[], float] = clock or time.monotonic

    @property
    def chain(self) -> tuple[Provider, ...]:
        return self._chain

    @property
    def primary(self) -> Provider:
        return self._chain[0]

    async def dispatch(self, prompt: str, tier: object = None) -> str:
        result = await self.complete(PromptRequest(prompt=prompt, tier=tier))
        return result.content

    async def complete(self, request: PromptRequest) -> AIResult:
        tier = resolve_tier(request.tier)
        started = self._clock()

        for index, provider in enumerate(self._chain):
            provider_tier = tier if index == 0 and provider.supports_tier else None
            attempt_started = self._clock()
            try:
                text = await self._invoke(provider, request.prompt, provider_tier)
            except Exception as e:
                provider_attempts_total.labels(provider=provider.name, outcome="failure").inc()
                self._log.warning(
                    "provider_failed",
                    provider=provider.name,
                    attempt=index + 1,
                    error=str(e) or type(e).__name__,
                )
                continue
            finally:
                provider_latency_seconds.labels(provider=provider.name).observe(
                    max(0.0, self._clock() - attempt_started)
                )

            provider_attempts_total.labels(provider=provider.name, outcome="success").inc()
            self._log.info("provider_ok", provider=provider.name, attempt=index + 1, tier=tier.value)
            return AIResult(
                provider_name=provider.name,
                tier=tier.value,
                content=text,
                latency_seconds=max(0.0, self._clock() - started),
                attempts=index + 1,
            )

        dispatch_exhausted_total.inc()
        self._log.error("dispatch_exhausted", providers=[p.name for p in self._chain])
        raise AllProvidersFailedError()

    async def _invoke(self, provider: Provider, prompt: str, tier: ModelTier | None) -> str:
        if self._provider_timeout is None:
            text = await provider.invoke(prompt, tier)
        else:
            try:
                text = await asyncio.wait_for(provider.invoke(prompt, tier), timeout=self._provider_timeout)
            except asyncio.TimeoutError as e:
                raise RequestTimeoutError(
                    f"{provider.name} exceeded the {self._provider_timeout}s provider deadline."
                ) from e
        if not isinstance(text, str) or not text.strip():
            raise EmptyResponseError(f"{provider.name} returned an empty response.")
        return text
