import pytest

from x402_ai_gateway.tiering import DEFAULT_TIER, ModelTier, resolve_tier


@pytest.mark.parametrize(
    "value,expected",
    [
        ("lite", ModelTier.LITE),
        (" PRO ", ModelTier.PRO),
        ("vision", ModelTier.VISION),
        (ModelTier.LITE, ModelTier.LITE),
        (None, DEFAULT_TIER),
        ("", DEFAULT_TIER),
        ("premium", DEFAULT_TIER),
    ],
)
def test_resolve_tier(value, expected):
    assert resolve_tier(value) is expected


def test_default_tier_is_standard():
    assert DEFAULT_TIER is ModelTier.STANDARD


@pytest.mark.parametrize("value", [5, True, ["pro"], {"x": 1}, 1.5])
def test_non_string_tier_resolves_to_default(value):
    assert resolve_tier(value) is DEFAULT_TIER
