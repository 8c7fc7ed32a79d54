import pytest
import httpx

from x402_ai_gateway.config import GatewayConfig
from x402_ai_gateway.dispatcher import FailoverDispatcher
from x402_ai_gateway.router_contracts import Provider


def _fake_dispatcher(content: str = "ok"):
    async def invoke(prompt, tier):
        return content

    return FailoverDispatcher([Provider(name="Fake", invoke=invoke)])


def _cfg(**overrides):
    base = dict(enable_metrics=False, pay_to_address=None)
    base.update(overrides)
    return GatewayConfig(**base)


@pytest.mark.asyncio
async def test_server_enforces_max_body_size_413():
    pytest.importorskip("fastapi")
    from x402_ai_gateway.server import create_app

    app = create_app(cfg=_cfg(max_request_body_bytes=60), dispatcher=_fake_dispatcher())
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        payload = b'{"text":"' + (b"x" * 200) + b'"}'
        resp = await client.post(
            "/api/summarize",
            content=payload,
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 413
        assert resp.json()["error"]["type"] == "invalid_request_error"


@pytest.mark.asyncio
async def test_server_sets_security_headers_and_request_id():
    pytest.importorskip("fastapi")
    from x402_ai_gateway.server import create_app

    app = create_app(cfg=_cfg(), dispatcher=_fake_dispatcher())
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/health", headers={"X-Request-Id": "req_12345678"})
        assert resp.status_code == 200
        assert resp.headers.get("X-Request-Id") == "req_12345678"
        assert resp.headers.get("X-Content-Type-Options") == "nosniff"
        assert resp.headers.get("X-Frame-Options") == "DENY"
        assert resp.headers.get("Referrer-Policy") == "no-referrer"
        assert resp.headers.get("Cache-Control") is None

        resp2 = await client.post("/api/chat", json={"question": "hi"})
        assert resp2.status_code == 200
        assert resp2.headers.get("Cache-Control") == "no-store"
        assert len(resp2.headers.get("X-Request-Id", "")) == 32


@pytest.mark.asyncio
async def test_malformed_request_id_is_replaced():
    pytest.importorskip("fastapi")
    from x402_ai_gateway.server import create_app

    app = create_app(cfg=_cfg(), dispatcher=_fake_dispatcher())
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/health", headers={"X-Request-Id": "bad id!"})
    assert resp.headers.get("X-Request-Id") != "bad id!"


@pytest.mark.asyncio
async def test_server_cors_allowlist_applies():
    pytest.importorskip("fastapi")
    from x402_ai_gateway.server import create_app

    app = create_app(cfg=_cfg(cors_allow_origins=["https://example.com"]), dispatcher=_fake_dispatcher())
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.options(
            "/api/chat",
            headers={
                "Origin": "https://example.com",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert resp.status_code in (200, 204)
        assert resp.headers.get("access-control-allow-origin") == "https://example.com"


def test_cors_wildcard_with_credentials_is_rejected():
    pytest.importorskip("fastapi")
    from x402_ai_gateway.server import create_app

    with pytest.raises(ValueError):
        create_app(
            cfg=_cfg(cors_allow_origins=["*"], cors_allow_credentials=True),
            dispatcher=_fake_dispatcher(),
        )
