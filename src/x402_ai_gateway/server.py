from __future__ import annotations

import asyncio
import os
import time
from contextlib import asynccontextmanager
from typing import Any

import structlog

from .api_models import AIResponse, HealthResponse, make_error_response
from .catalog import CATALOG, AIEndpoint
from .config import GatewayConfig
from .dispatcher import FailoverDispatcher
from .errors import (
    AllProvidersFailedError,
    GatewayError,
    InvalidRequestError,
    RequestTimeoutError,
)
from .http_security import install_middlewares
from .logging import configure_logging
from .metrics import maybe_start_metrics, server_errors_total, server_request_latency_seconds, server_requests_total
from .payment_gate import install_payment_gate
from .providers import build_provider_chain, build_sessions

log = structlog.get_logger()


def create_app(cfg: GatewayConfig | None = None, dispatcher: FailoverDispatcher | None = None):
    try:
        from fastapi import Body, FastAPI
        from fastapi.responses import JSONResponse
    except ImportError as e:  # pragma: no cover
        raise RuntimeError('Install the "server" extra: pip install -e ".[server]"') from e

    cfg = cfg or GatewayConfig()
    configure_logging(level=cfg.log_level, fmt=cfg.log_format, secrets=cfg.secrets())

    sessions = {}
    if dispatcher is None:
        sessions = build_sessions(cfg)
        dispatcher = FailoverDispatcher(
            build_provider_chain(cfg.ai_provider, cfg.provider_order, sessions),
            provider_timeout_seconds=cfg.provider_timeout_seconds,
        )

    def _request_id(request) -> str | None:
        return getattr(getattr(request, "state", None), "request_id", None)

    def _observe(path: str, status_code: int, started_at: float) -> None:
        server_requests_total.labels(path=path, status=str(status_code)).inc()
        server_request_latency_seconds.labels(path=path).observe(max(0.0, time.monotonic() - started_at))

    def _error_response(request, *, status_code: int, message: str, type_: str):
        server_errors_total.labels(type=type_).inc()
        return JSONResponse(
            status_code=status_code,
            content=make_error_response(message=message, type=type_, code=_request_id(request)).model_dump(),
        )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        maybe_start_metrics(enable=cfg.enable_metrics, bind=cfg.metrics_bind, port=cfg.metrics_port)
        log.info(
            "gateway_started",
            primary=dispatcher.primary.name,
            chain=[p.name for p in dispatcher.chain],
            paid_endpoints=len(CATALOG),
        )
        try:
            yield
        finally:
            for session in sessions.values():
                await session.close()

    app = FastAPI(
        title="x402-ai-gateway",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if cfg.enable_api_docs else None,
        redoc_url="/redoc" if cfg.enable_api_docs else None,
        openapi_url="/openapi.json" if cfg.enable_api_docs else None,
    )
    # Gate first so the hardening middleware wraps 402 responses too.
    install_payment_gate(app, cfg=cfg, endpoints=CATALOG)
    install_middlewares(app, cfg=cfg)

    @app.exception_handler(InvalidRequestError)
    async def _invalid_request_handler(request, exc: InvalidRequestError):
        return _error_response(request, status_code=400, message=str(exc), type_="invalid_request_error")

    @app.exception_handler(AllProvidersFailedError)
    async def _exhausted_handler(request, exc: AllProvidersFailedError):
        return _error_response(request, status_code=503, message=str(exc), type_="upstream_error")

    @app.exception_handler(RequestTimeoutError)
    async def _timeout_handler(request, exc: RequestTimeoutError):
        return _error_response(
            request, status_code=504, message=str(exc) or "Request timed out.", type_="upstream_error"
        )

    @app.exception_handler(GatewayError)
    async def _gateway_error_handler(request, exc: GatewayError):
        return _error_response(request, status_code=500, message=str(exc), type_="api_error")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            network=cfg.x402_network,
            provider=cfg.ai_provider,
            endpoints=len(CATALOG),
        )

    def _make_handler(endpoint: AIEndpoint):
        async def handler(body: dict[str, Any] | None = Body(default=None)):
            started_at = time.monotonic()
            req = endpoint.parse(body)
            prompt = endpoint.build_prompt(req)
            if len(prompt) > cfg.max_prompt_chars:
                raise InvalidRequestError("Input too large.")

            try:
                result = await asyncio.wait_for(
                    dispatcher.dispatch(prompt, req.tier),
                    timeout=max(0.0, float(cfg.dispatch_timeout_seconds or 0)) or None,
                )
            except asyncio.TimeoutError as e:
                raise RequestTimeoutError("Request timed out.") from e

            _observe(endpoint.path, 200, started_at)
            return AIResponse(result=result, endpoint=endpoint.name, **endpoint.response_extras(req)).model_dump()

        handler.__name__ = "ai_" + endpoint.name.replace("-", "_")
        return handler

    for endpoint in CATALOG:
        app.add_api_route(
            endpoint.path,
            _make_handler(endpoint),
            methods=["POST"],
            summary=endpoint.description,
        )

    return app


app = create_app()


def main() -> None:  # pragma: no cover
    try:
        import uvicorn
    except ImportError as e:
        raise RuntimeError('Install the "server" extra: pip install -e ".[server]"') from e

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    uvicorn.run("x402_ai_gateway.server:app", host=host, port=port)


if __name__ == "__main__":  # pragma: no cover
    main()
