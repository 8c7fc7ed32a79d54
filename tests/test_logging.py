from x402_ai_gateway.logging import _redact_obj, redact_text


def test_redacts_configured_secrets_and_bearer_tokens():
    out = redact_text("sent Bearer sk-or-abcdef123 with hf_secret", secrets=["hf_secret"])
    assert "sk-or-abcdef123" not in out
    assert "hf_secret" not in out
    assert "Bearer [REDACTED]" in out


def test_redacts_gemini_query_key():
    url = "https://generativelanguage.googleapis.com/v1beta/models/m:generateContent?key=AIzaSecret&alt=json"
    out = redact_text(url, secrets=[])
    assert "AIzaSecret" not in out
    assert "?key=[REDACTED]&alt=json" in out


def test_redacts_sensitive_keys_recursively():
    event = {
        "event": "provider_failed",
        "provider": "Gemini",
        "headers": {"Authorization": "Bearer abcdefgh", "X-PAYMENT": "eyJwYXlsb2Fk"},
        "attempts": [1, 2],
    }
    out = _redact_obj(event, secrets=[])
    assert out["provider"] == "Gemini"
    assert out["headers"]["Authorization"] == "[REDACTED]"
    assert out["headers"]["X-PAYMENT"] == "[REDACTED]"
    assert out["attempts"] == [1, 2]
