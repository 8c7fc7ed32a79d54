from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from .catalog import AIEndpoint
from .config import GatewayConfig

log = structlog.get_logger()


def route_key(endpoint: AIEndpoint) -> str:
    return f"POST {endpoint.path}"


def build_payment_routes(cfg: GatewayConfig, endpoints: Iterable[AIEndpoint]) -> dict[str, Any]:
    """Per-endpoint x402 payment terms, keyed the way the SDK middleware matches requests."""
    from x402.http import PaymentOption
    from x402.http.types import RouteConfig

    return {
        route_key(endpoint): RouteConfig(
            accepts=[
                PaymentOption(
                    scheme="exact",
                    pay_to=cfg.pay_to_address,
                    price=endpoint.price,
                    network=cfg.x402_network,
                )
            ],
            mime_type="application/json",
            description=endpoint.description,
        )
        for endpoint in endpoints
    }


def install_payment_gate(app, *, cfg: GatewayConfig, endpoints: Iterable[AIEndpoint]) -> bool:
    """
    Put the x402 SDK middleware in front of the paid endpoints.

    Payment proofs are verified and settled by the facilitator through the SDK;
    this gateway never looks at them. Returns False (dev mode) when no pay-to
    address is configured.
    """
    if not cfg.payment_gate_enabled():
        log.warning(
            "payment_gate_disabled",
            reason="ENABLE_X402=false" if not cfg.enable_x402 else "PAY_TO_ADDRESS not set",
        )
        return False

    try:
        from x402.http import FacilitatorConfig, HTTPFacilitatorClient
        from x402.http.middleware.fastapi import payment_middleware
        from x402.mechanisms.evm.exact import ExactEvmServerScheme
        from x402.server import x402ResourceServer
    except ImportError as e:  # pragma: no cover
        raise RuntimeError('Install the "payments" extra: pip install -e ".[payments]"') from e

    facilitator = HTTPFacilitatorClient(FacilitatorConfig(url=cfg.facilitator_url))
    resource_server = x402ResourceServer(facilitator)
    resource_server.register(cfg.x402_network, ExactEvmServerScheme())

    gate = payment_middleware(routes=build_payment_routes(cfg, endpoints), server=resource_server)

    @app.middleware("http")
    async def x402_payment_gate(request, call_next):
        return await gate(request, call_next)

    log.info(
        "payment_gate_enabled",
        network=cfg.x402_network,
        facilitator=cfg.facilitator_url,
        pay_to=cfg.pay_to_address,
    )
    return True
