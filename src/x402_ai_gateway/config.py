from __future__ import annotations

import os

from pydantic import BaseModel, Field

from .tiering import ModelTier


def _parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def _tier_models(prefix: str, defaults: dict[ModelTier, str]) -> dict[ModelTier, str]:
    # e.g. OPENROUTER_MODEL_PRO overrides the "pro" entry
    return {tier: os.getenv(f"{prefix}_{tier.value.upper()}", model) for tier, model in defaults.items()}


_OPENROUTER_TIER_DEFAULTS = {
    ModelTier.LITE: "google/gemma-2-9b-it:free",
    ModelTier.STANDARD: "openrouter/free",
    ModelTier.PRO: "meta-llama/llama-3.3-70b-instruct",
    ModelTier.VISION: "meta-llama/llama-3.2-11b-vision-instruct",
}

_GEMINI_TIER_DEFAULTS = {
    ModelTier.LITE: "gemini-2.0-flash-lite",
    ModelTier.STANDARD: "gemini-2.0-flash",
    ModelTier.PRO: "gemini-1.5-pro",
    ModelTier.VISION: "gemini-2.0-flash",
}


class GatewayConfig(BaseModel):
    # Provider selection
    ai_provider: str = Field(default_factory=lambda: os.getenv("AI_PROVIDER", "openrouter").strip().lower())
    provider_order: list[str] = Field(
        default_factory=lambda: _parse_csv(os.getenv("PROVIDER_ORDER", "openrouter,gemini,huggingface"))
    )

    # Provider credentials
    openrouter_api_key: str | None = Field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY"))
    gemini_api_key: str | None = Field(default_factory=lambda: os.getenv("GEMINI_API_KEY"))
    hf_token: str | None = Field(default_factory=lambda: os.getenv("HF_TOKEN"))

    # Provider models
    openrouter_models: dict[ModelTier, str] = Field(
        default_factory=lambda: _tier_models("OPENROUTER_MODEL", _OPENROUTER_TIER_DEFAULTS)
    )
    gemini_models: dict[ModelTier, str] = Field(
        default_factory=lambda: _tier_models("GEMINI_MODEL", _GEMINI_TIER_DEFAULTS)
    )
    hf_model: str = Field(
        default_factory=lambda: os.getenv("HF_MODEL", "mistralai/Mistral-7B-Instruct-v0.3")
    )
    openrouter_max_tokens: int = Field(default_factory=lambda: int(os.getenv("OPENROUTER_MAX_TOKENS", "1000")))
    hf_max_new_tokens: int = Field(default_factory=lambda: int(os.getenv("HF_MAX_NEW_TOKENS", "500")))

    # Upstream deadlines
    upstream_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "60"))
    )
    provider_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "30"))
    )
    dispatch_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("DISPATCH_TIMEOUT_SECONDS", "120"))
    )

    # x402 payment gate
    enable_x402: bool = Field(default_factory=lambda: os.getenv("ENABLE_X402", "true").lower() == "true")
    pay_to_address: str | None = Field(default_factory=lambda: os.getenv("PAY_TO_ADDRESS"))
    x402_network: str = Field(default_factory=lambda: os.getenv("X402_NETWORK", "eip155:8453"))
    facilitator_url: str = Field(
        default_factory=lambda: os.getenv("FACILITATOR_URL", "https://x402.org/facilitator")
    )

    # Observability
    enable_metrics: bool = Field(
        default_factory=lambda: os.getenv("ENABLE_METRICS", "false").lower() == "true"
    )
    metrics_bind: str = Field(default_factory=lambda: os.getenv("METRICS_BIND", "127.0.0.1"))
    metrics_port: int = Field(default_factory=lambda: int(os.getenv("METRICS_PORT", "9109")))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = Field(default_factory=lambda: os.getenv("LOG_FORMAT", "json"))

    # Server hardening
    enable_api_docs: bool = Field(
        default_factory=lambda: os.getenv("ENABLE_API_DOCS", "false").lower() == "true"
    )
    allowed_hosts: list[str] = Field(default_factory=lambda: _parse_csv(os.getenv("ALLOWED_HOSTS")))
    cors_allow_origins: list[str] = Field(default_factory=lambda: _parse_csv(os.getenv("CORS_ALLOW_ORIGINS")))
    cors_allow_credentials: bool = Field(
        default_factory=lambda: os.getenv("CORS_ALLOW_CREDENTIALS", "false").lower() == "true"
    )
    max_request_body_bytes: int = Field(
        default_factory=lambda: int(os.getenv("MAX_REQUEST_BODY_BYTES", str(256 * 1024)))
    )
    max_inflight_requests: int = Field(default_factory=lambda: int(os.getenv("MAX_INFLIGHT_REQUESTS", "32")))
    max_prompt_chars: int = Field(default_factory=lambda: int(os.getenv("MAX_PROMPT_CHARS", "20000")))

    def payment_gate_enabled(self) -> bool:
        return self.enable_x402 and bool(self.pay_to_address)

    def secrets(self) -> list[str]:
        return [s for s in (self.openrouter_api_key, self.gemini_api_key, self.hf_token) if s]
