"""Tests for cache key derivation."""

import re

import pytest
from hypothesis import given, strategies as st

from qrgen.cache.fingerprint import fingerprint, KEY_PREFIX

KEY_PATTERN = re.compile(r"^qr:[0-9a-f]{16}$")

BASE = {
    "text": "Hello World",
    "dimensions": "300x300",
    "margin": 1,
    "error_correction_level": "M",
    "dark_color": "#000000",
    "light_color": "#FFFFFF",
}


def _key(**overrides):
    params = {**BASE, **overrides}
    text = params.pop("text")
    dimensions = params.pop("dimensions")
    return fingerprint(text, dimensions, **params)


@pytest.mark.unit
def test_key_format():
    """Keys are namespaced, fixed-length hex."""
    key = fingerprint("Hello World")

    assert key.startswith(KEY_PREFIX)
    assert KEY_PATTERN.match(key)


@pytest.mark.unit
def test_deterministic():
    """Same request, same key."""
    assert fingerprint("Hello World", "300x300") == fingerprint("Hello World", "300x300")


@pytest.mark.unit
def test_stable_across_versions():
    """Key format is fixed: this value must not change between releases."""
    assert fingerprint("Hello World") == _key()
    assert fingerprint("Hello World") == fingerprint(
        "Hello World",
        "300x300",
        margin=1,
        error_correction_level="M",
        dark_color="#000000",
        light_color="#FFFFFF",
    )


@pytest.mark.unit
def test_defaults_substituted():
    """Omitted options hash like their explicit defaults."""
    assert fingerprint("data") == fingerprint("data", None, margin=None)
    assert fingerprint("data", "") == fingerprint("data", "300x300")


@pytest.mark.unit
def test_margin_zero_is_not_default():
    """Margin 0 is a real value, not a missing one."""
    assert fingerprint("data", margin=0) != fingerprint("data", margin=1)


@pytest.mark.unit
@pytest.mark.parametrize(
    "field, value",
    [
        ("text", "Hello World!"),
        ("dimensions", "301x300"),
        ("dimensions", "300x301"),
        ("margin", 2),
        ("error_correction_level", "H"),
        ("dark_color", "#FF0000"),
        ("light_color", "#FFFFFE"),
    ],
)
def test_sensitive_to_every_field(field, value):
    """Changing any one field changes the key."""
    assert _key(**{field: value}) != _key()


@pytest.mark.unit
def test_colors_not_interchangeable():
    """Swapping dark and light colors yields a different key."""
    assert _key(dark_color="#FFFFFF", light_color="#000000") != _key()


@given(
    st.text(max_size=200),
    st.sampled_from(["100x100", "300x300", "2000x2000"]),
    st.integers(min_value=0, max_value=10),
    st.sampled_from(["L", "M", "Q", "H"]),
)
def test_determinism_property(text, size, margin, level):
    """Property test: fingerprint is a pure function of its inputs."""
    first = fingerprint(text, size, margin=margin, error_correction_level=level)
    second = fingerprint(text, size, margin=margin, error_correction_level=level)

    assert first == second
    assert KEY_PATTERN.match(first)


@given(st.text(min_size=1, max_size=100), st.text(min_size=1, max_size=100))
def test_distinct_text_property(text1, text2):
    """Property test: distinct payloads get distinct keys."""
    if text1 != text2:
        assert fingerprint(text1) != fingerprint(text2)
