from __future__ import annotations


class GatewayError(Exception):
    """Base error for gateway failures."""


class ConfigurationError(GatewayError):
    pass


class InvalidRequestError(GatewayError):
    """Request body failed validation (missing or malformed fields)."""


class AuthenticationError(GatewayError):
    pass


class RateLimitError(GatewayError):
    def __init__(self, retry_after_seconds: int | None = None, message: str = "Rate limited"):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class UpstreamProtocolError(GatewayError):
    """Unexpected upstream response shape / contract mismatch."""


class EmptyResponseError(GatewayError):
    """Provider answered but produced no usable text."""


class RequestTimeoutError(GatewayError):
    """Server-side request deadline exceeded."""


class AllProvidersFailedError(GatewayError):
    def __init__(self, message: str = "All AI providers failed. Try again later."):
        super().__init__(message)
