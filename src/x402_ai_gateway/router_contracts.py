from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .tiering import ModelTier

Invoke = Callable[[str, ModelTier | None], Awaitable[str]]


@dataclass(frozen=True)
class Provider:
    name: str
    invoke: Invoke
    supports_tier: bool = False


@dataclass(frozen=True)
class PromptRequest:
    prompt: str
    tier: object = None


@dataclass(frozen=True)
class AIResult:
    provider_name: str
    tier: str
    content: str
    latency_seconds: float
    attempts: int
