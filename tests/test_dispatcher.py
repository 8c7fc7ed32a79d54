import asyncio

import pytest
from prometheus_client import REGISTRY

from x402_ai_gateway import AllProvidersFailedError, FailoverDispatcher, ModelTier, PromptRequest, Provider
from x402_ai_gateway.errors import ConfigurationError, UpstreamProtocolError


class RecordingLogger:
    def __init__(self):
        self.events = []

    def info(self, event, **kw):
        self.events.append(("info", event, kw))

    def warning(self, event, **kw):
        self.events.append(("warning", event, kw))

    def error(self, event, **kw):
        self.events.append(("error", event, kw))

    def failures(self):
        return [kw["provider"] for level, event, kw in self.events if event == "provider_failed"]


def _provider(name, behavior, calls, *, supports_tier=False):
    async def invoke(prompt, tier):
        calls.append((name, prompt, tier))
        if isinstance(behavior, BaseException):
            raise behavior
        return behavior

    return Provider(name=name, invoke=invoke, supports_tier=supports_tier)


@pytest.mark.asyncio
async def test_first_provider_success_skips_the_rest():
    calls = []
    chain = [_provider("A", "alpha", calls), _provider("B", "beta", calls), _provider("C", "gamma", calls)]
    d = FailoverDispatcher(chain, logger=RecordingLogger())

    out = await d.dispatch("hi")

    assert out == "alpha"
    assert [c[0] for c in calls] == ["A"]


@pytest.mark.asyncio
async def test_falls_through_failures_to_first_success():
    calls = []
    chain = [
        _provider("A", UpstreamProtocolError("boom"), calls),
        _provider("B", RuntimeError("down"), calls),
        _provider("C", "ok from C", calls),
        _provider("D", "never", calls),
    ]
    d = FailoverDispatcher(chain, logger=RecordingLogger())

    res = await d.complete(PromptRequest(prompt="hi"))

    assert res.content == "ok from C"
    assert res.provider_name == "C"
    assert res.attempts == 3
    assert [c[0] for c in calls] == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_all_providers_failing_raises_aggregate_error_once_each():
    calls = []
    logger = RecordingLogger()
    chain = [
        _provider("A", UpstreamProtocolError("OpenRouter error 500."), calls),
        _provider("B", "", calls),
        _provider("C", TimeoutError(), calls),
    ]
    d = FailoverDispatcher(chain, logger=logger)
    before = REGISTRY.get_sample_value("dispatch_exhausted_total") or 0.0

    with pytest.raises(AllProvidersFailedError) as exc:
        await d.dispatch("hi")

    assert [c[0] for c in calls] == ["A", "B", "C"]
    assert "OpenRouter" not in str(exc.value)
    assert "try again later" in str(exc.value).lower()
    assert logger.failures() == ["A", "B", "C"]
    assert REGISTRY.get_sample_value("dispatch_exhausted_total") == before + 1


@pytest.mark.asyncio
async def test_whitespace_only_response_is_a_failure():
    calls = []
    chain = [_provider("A", " \n\t ", calls), _provider("B", "real answer", calls)]
    d = FailoverDispatcher(chain, logger=RecordingLogger())

    assert await d.dispatch("hi") == "real answer"
    assert [c[0] for c in calls] == ["A", "B"]


@pytest.mark.asyncio
async def test_capital_of_france_scenario_logs_two_failures():
    calls = []
    logger = RecordingLogger()
    chain = [
        _provider("A", UpstreamProtocolError("503"), calls),
        _provider("B", "   ", calls),
        _provider("C", "Paris", calls),
    ]
    d = FailoverDispatcher(chain, logger=logger)

    out = await d.dispatch("What is the capital of France?")

    assert out == "Paris"
    assert logger.failures() == ["A", "B"]
    errors = [kw["error"] for _, event, kw in logger.events if event == "provider_failed"]
    assert errors[0] == "503"
    assert "empty" in errors[1]


@pytest.mark.asyncio
async def test_only_primary_receives_the_tier():
    calls = []
    chain = [
        _provider("A", UpstreamProtocolError("down"), calls, supports_tier=True),
        _provider("B", "ok", calls, supports_tier=True),
    ]
    d = FailoverDispatcher(chain, logger=RecordingLogger())

    await d.dispatch("hi", tier="pro")

    assert calls[0][2] is ModelTier.PRO
    assert calls[1][2] is None


@pytest.mark.asyncio
async def test_unknown_tier_falls_back_to_default_without_error():
    calls = []
    d = FailoverDispatcher([_provider("A", "ok", calls, supports_tier=True)], logger=RecordingLogger())

    res = await d.complete(PromptRequest(prompt="hi", tier="ultra-mega"))

    assert res.content == "ok"
    assert res.tier == "standard"
    assert calls[0][2] is ModelTier.STANDARD


@pytest.mark.asyncio
async def test_primary_without_tier_support_gets_none():
    calls = []
    d = FailoverDispatcher([_provider("A", "ok", calls, supports_tier=False)], logger=RecordingLogger())

    await d.dispatch("hi", tier="lite")

    assert calls[0][2] is None


@pytest.mark.asyncio
async def test_provider_exceeding_deadline_falls_through():
    calls = []

    async def slow(prompt, tier):
        calls.append("slow")
        await asyncio.sleep(1)
        return "too late"

    logger = RecordingLogger()
    chain = [Provider(name="Slow", invoke=slow), _provider("Fast", "quick", calls)]
    d = FailoverDispatcher(chain, provider_timeout_seconds=0.01, logger=logger)

    assert await d.dispatch("hi") == "quick"
    assert logger.failures() == ["Slow"]


@pytest.mark.asyncio
async def test_non_string_response_is_a_failure():
    calls = []
    chain = [_provider("A", None, calls), _provider("B", "ok", calls)]
    d = FailoverDispatcher(chain, logger=RecordingLogger())

    assert await d.dispatch("hi") == "ok"


@pytest.mark.asyncio
async def test_empty_prompt_is_forwarded_not_rejected():
    calls = []
    d = FailoverDispatcher([_provider("A", "ok", calls)], logger=RecordingLogger())

    assert await d.dispatch("") == "ok"
    assert calls[0][1] == ""


def test_empty_chain_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        FailoverDispatcher([])


@pytest.mark.asyncio
async def test_non_string_tier_falls_back_to_default():
    calls = []
    d = FailoverDispatcher([_provider("A", "ok", calls, supports_tier=True)], logger=RecordingLogger())

    res = await d.complete(PromptRequest(prompt="hi", tier=5))

    assert res.tier == "standard"
    assert calls[0][2] is ModelTier.STANDARD


@pytest.mark.asyncio
async def test_provider_timeout_error_keeps_its_own_message_without_deadline():
    calls = []
    logger = RecordingLogger()
    chain = [_provider("A", TimeoutError("socket read timed out"), calls), _provider("B", "ok", calls)]
    d = FailoverDispatcher(chain, logger=logger)

    assert await d.dispatch("hi") == "ok"
    failed = [kw for level, event, kw in logger.events if event == "provider_failed"]
    assert failed[0]["error"] == "socket read timed out"
