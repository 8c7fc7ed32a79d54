from __future__ import annotations

import asyncio
import re
import uuid

import structlog

from .api_models import make_error_response
from .config import GatewayConfig

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{8,128}$")

PAID_PATH_PREFIX = "/api/"


def coerce_request_id(value: str | None) -> str:
    if value and _REQUEST_ID_RE.fullmatch(value):
        return value
    return uuid.uuid4().hex


def is_paid_path(path: str) -> bool:
    return path.startswith(PAID_PATH_PREFIX)


def install_middlewares(app, *, cfg: GatewayConfig) -> None:
    """Request ids, security headers, body-size and in-flight limits, optional hosts/CORS."""
    from fastapi.responses import JSONResponse
    from starlette.middleware.base import BaseHTTPMiddleware
    from starlette.requests import Request

    def _error(status_code: int, message: str, type_: str, request: Request) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=make_error_response(
                message=message,
                type=type_,
                code=getattr(request.state, "request_id", None),
            ).model_dump(),
        )

    class RequestIdMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next):
            request_id = coerce_request_id(request.headers.get("x-request-id"))
            request.state.request_id = request_id
            structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path)
            try:
                response = await call_next(request)
            finally:
                structlog.contextvars.clear_contextvars()
            response.headers.setdefault("X-Request-Id", request_id)
            return response

    class SecurityHeadersMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next):
            response = await call_next(request)
            response.headers.setdefault("X-Content-Type-Options", "nosniff")
            response.headers.setdefault("X-Frame-Options", "DENY")
            response.headers.setdefault("Referrer-Policy", "no-referrer")
            response.headers.setdefault("Cross-Origin-Resource-Policy", "same-site")
            if not cfg.enable_api_docs:
                response.headers.setdefault("X-Robots-Tag", "noindex, nofollow")
            if is_paid_path(request.url.path):
                response.headers.setdefault("Cache-Control", "no-store")
                response.headers.setdefault("Pragma", "no-cache")
            return response

    class MaxBodySizeMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next):
            limit = int(cfg.max_request_body_bytes or 0)
            if limit > 0 and request.method == "POST" and is_paid_path(request.url.path):
                content_length = request.headers.get("content-length")
                if content_length and content_length.isdigit() and int(content_length) > limit:
                    return _error(413, "Request body too large.", "invalid_request_error", request)
                body = await request.body()
                if len(body) > limit:
                    return _error(413, "Request body too large.", "invalid_request_error", request)
            return await call_next(request)

    class ConcurrencyLimitMiddleware(BaseHTTPMiddleware):
        def __init__(self, app_):
            super().__init__(app_)
            self._sem = asyncio.Semaphore(max(1, int(cfg.max_inflight_requests or 1)))

        async def dispatch(self, request: Request, call_next):
            if not is_paid_path(request.url.path):
                return await call_next(request)
            if self._sem.locked():
                return _error(429, "Server is busy. Try again later.", "rate_limit_error", request)
            async with self._sem:
                return await call_next(request)

    app.add_middleware(MaxBodySizeMiddleware)
    app.add_middleware(ConcurrencyLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    # Outermost so `X-Request-Id` is set even when inner middleware short-circuits.
    app.add_middleware(RequestIdMiddleware)

    if cfg.allowed_hosts:
        from starlette.middleware.trustedhost import TrustedHostMiddleware

        app.add_middleware(TrustedHostMiddleware, allowed_hosts=list(cfg.allowed_hosts))

    if cfg.cors_allow_origins:
        from fastapi.middleware.cors import CORSMiddleware

        if cfg.cors_allow_credentials and "*" in cfg.cors_allow_origins:
            raise ValueError("CORS_ALLOW_ORIGINS cannot include '*' when CORS_ALLOW_CREDENTIALS=true.")
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cfg.cors_allow_origins),
            allow_credentials=cfg.cors_allow_credentials,
            allow_methods=["GET", "POST", "OPTIONS"],
            # x402 clients resend with the payment proof and read the settlement header.
            allow_headers=["Content-Type", "X-Request-Id", "X-PAYMENT", "PAYMENT-SIGNATURE"],
            expose_headers=["X-PAYMENT-RESPONSE", "PAYMENT-RESPONSE", "PAYMENT-REQUIRED"],
            max_age=600,
        )
