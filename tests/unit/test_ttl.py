"""Tests for the TTL policy."""

import pytest

from qrgen.cache.ttl import BASE_TTL, colors_customized, compute_ttl


@pytest.mark.unit
def test_baseline():
    """Small default requests get the baseline."""
    assert compute_ttl() == BASE_TTL == 300
    assert compute_ttl("300x300") == 300


@pytest.mark.unit
@pytest.mark.parametrize(
    "size, expected",
    [
        ("400x400", 300),     # area 160,000 is not above the lower cutoff
        ("401x400", 900),
        ("500x500", 900),     # 250,000
        ("632x632", 900),     # 399,424
        ("800x500", 900),     # 400,000 is not above the upper cutoff
        ("801x500", 1800),
        ("1000x1000", 1800),
    ],
)
def test_size_tiers(size, expected):
    """Area cutoffs are exclusive and checked largest first."""
    assert compute_ttl(size) == expected


@pytest.mark.unit
def test_high_error_correction_surcharge():
    """Level H multiplies by 1.5."""
    assert compute_ttl("300x300", "H") == 450
    assert compute_ttl("500x500", "H") == 1350
    assert compute_ttl("1000x1000", "H") == 2700


@pytest.mark.unit
@pytest.mark.parametrize("level", ["L", "M", "Q"])
def test_other_levels_no_surcharge(level):
    """Only H is surcharged."""
    assert compute_ttl("300x300", level) == 300


@pytest.mark.unit
def test_custom_color_surcharge():
    """Either custom color multiplies by 1.2."""
    assert compute_ttl("300x300", dark_color="#FF6B35") == 360
    assert compute_ttl("300x300", light_color="#F7F7F7") == 360
    assert compute_ttl("500x500", dark_color="#FF6B35", light_color="#F7F7F7") == 1080


@pytest.mark.unit
def test_surcharges_compound():
    """H and custom colors stack on the size tier."""
    assert compute_ttl("500x500", "H", "#FF6B35") == 1620
    assert compute_ttl("1000x1000", "H", "#FF6B35") == 3240


@pytest.mark.unit
def test_default_colors_any_case():
    """Default colors in lower case are not custom."""
    assert compute_ttl("300x300", dark_color="#000000", light_color="#ffffff") == 300
    assert colors_customized("#000000", "#ffffff") is False
    assert colors_customized(None, None) is False
    assert colors_customized("#000001", None) is True


@pytest.mark.unit
@pytest.mark.parametrize("size", ["huge", "1000", "x", "1000x", "-5x-5", None, ""])
def test_malformed_size_uses_baseline(size):
    """Unparseable sizes never escalate or fail."""
    assert compute_ttl(size) == 300


@pytest.mark.unit
def test_monotonic_in_size():
    """Bigger codes never expire sooner."""
    for level in ("M", "H"):
        for color in ("#000000", "#123456"):
            small = compute_ttl("300x300", level, color)
            medium = compute_ttl("500x500", level, color)
            large = compute_ttl("1000x1000", level, color)
            assert small <= medium <= large


@pytest.mark.unit
def test_monotonic_in_options():
    """H and custom colors never shorten the TTL."""
    for size in ("300x300", "500x500", "1000x1000"):
        assert compute_ttl(size, "H") >= compute_ttl(size, "M")
        assert compute_ttl(size, "M", "#123456") >= compute_ttl(size, "M")


@pytest.mark.unit
def test_result_is_integer():
    """TTL is whole seconds."""
    assert isinstance(compute_ttl("1000x1000", "H", "#123456"), int)
