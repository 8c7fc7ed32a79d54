from __future__ import annotations

from collections.abc import Mapping

from .config import GatewayConfig
from .errors import ConfigurationError
from .gemini_session import GeminiSession
from .huggingface_session import HuggingFaceSession
from .openrouter_session import OpenRouterSession
from .router_contracts import Provider
from .upstream_session import UpstreamSession


def build_sessions(cfg: GatewayConfig) -> dict[str, UpstreamSession]:
    return {
        "openrouter": OpenRouterSession(
            cfg.openrouter_api_key,
            models=cfg.openrouter_models,
            max_tokens=cfg.openrouter_max_tokens,
            timeout_seconds=cfg.upstream_timeout_seconds,
        ),
        "gemini": GeminiSession(
            cfg.gemini_api_key,
            models=cfg.gemini_models,
            timeout_seconds=cfg.upstream_timeout_seconds,
        ),
        "huggingface": HuggingFaceSession(
            cfg.hf_token,
            model=cfg.hf_model,
            max_new_tokens=cfg.hf_max_new_tokens,
            timeout_seconds=cfg.upstream_timeout_seconds,
        ),
    }


def provider_from_session(session: UpstreamSession) -> Provider:
    return Provider(name=session.name, invoke=session.generate, supports_tier=session.supports_tier)


def chain_order(primary: str, order: list[str]) -> list[str]:
    """Primary first, then the configured order without duplicates."""
    names: list[str] = []
    for name in [primary, *order]:
        key = name.strip().lower()
        if key and key not in names:
            names.append(key)
    return names


def build_provider_chain(
    primary: str,
    order: list[str],
    sessions: Mapping[str, UpstreamSession],
) -> tuple[Provider, ...]:
    names = chain_order(primary, order)
    unknown = [n for n in names if n not in sessions]
    if unknown:
        raise ConfigurationError(f"Unknown AI provider(s): {', '.join(unknown)}.")
    return tuple(provider_from_session(sessions[n]) for n in names)
