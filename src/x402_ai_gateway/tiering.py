from __future__ import annotations

from enum import Enum


class ModelTier(str, Enum):
    LITE = "lite"
    STANDARD = "standard"
    PRO = "pro"
    VISION = "vision"


DEFAULT_TIER = ModelTier.STANDARD


def resolve_tier(value: object) -> ModelTier:
    """Map a caller-supplied tier to a known tier, falling back to the default.

    Unknown values never raise so a typo in a request body degrades to the
    default model instead of failing the call.
    """
    if isinstance(value, ModelTier):
        return value
    if not isinstance(value, str) or not value:
        return DEFAULT_TIER
    try:
        return ModelTier(value.strip().lower())
    except ValueError:
        return DEFAULT_TIER
