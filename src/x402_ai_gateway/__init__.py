from .config import GatewayConfig
from .dispatcher import FailoverDispatcher
from .errors import AllProvidersFailedError
from .router_contracts import AIResult, PromptRequest, Provider
from .tiering import ModelTier, resolve_tier

__all__ = [
    "AIResult",
    "AllProvidersFailedError",
    "FailoverDispatcher",
    "GatewayConfig",
    "ModelTier",
    "PromptRequest",
    "Provider",
    "resolve_tier",
]
