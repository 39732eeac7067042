# tests/unit/cache/test_fingerprint.py — v2
"""Tests for cache/fingerprint.py."""

from __future__ import annotations

import re

from agenticad.cache.fingerprint import (
    IMAGE_PREFIX_CHARS,
    TEXT_PREFIX_CHARS,
    cache_key,
    fingerprint,
    image_analysis_key,
    text_analysis_key,
    voice_synthesis_key,
)

_BASE36 = re.compile(r"^[0-9a-z]+$")


class TestFingerprint:
    def test_known_values(self):
        assert fingerprint("") == "0"
        assert fingerprint("a") == "2p"
        assert fingerprint("ab") == "2e9"

    def test_stable(self):
        text = "A compact desk organizer with three compartments"
        assert fingerprint(text) == fingerprint(text)

    def test_different_content_differs(self):
        assert fingerprint("gear") != fingerprint("gears")

    def test_long_input_is_base36(self):
        value = fingerprint("z" * 5000, prefix=None)
        assert _BASE36.match(value)

    def test_prefix_truncation(self):
        head = "x" * TEXT_PREFIX_CHARS
        assert fingerprint(head + "tail one") == fingerprint(head + "tail two")

    def test_no_prefix_hashes_everything(self):
        head = "x" * TEXT_PREFIX_CHARS
        assert fingerprint(head + "a", prefix=None) != fingerprint(head + "b", prefix=None)

    def test_non_string_coerced(self):
        assert fingerprint(123) == fingerprint("123")  # type: ignore[arg-type]


class TestCacheKeys:
    def test_namespace_prefix(self):
        assert cache_key("text_analysis", input="hi").startswith("text_analysis_")

    def test_param_order_irrelevant(self):
        assert cache_key("ns", a=1, b=2) == cache_key("ns", b=2, a=1)

    def test_text_key_matches_cache_key(self):
        assert text_analysis_key("hello") == cache_key("text_analysis", input="hello")

    def test_text_key_truncates(self):
        head = "y" * TEXT_PREFIX_CHARS
        assert text_analysis_key(head + "1") == text_analysis_key(head + "2")

    def test_image_key_ignores_suffix_beyond_prefix(self):
        head = "data:image/png;base64," + "A" * IMAGE_PREFIX_CHARS
        assert image_analysis_key(head + "xyz", "image_analysis") == image_analysis_key(
            head + "qrs", "image_analysis"
        )

    def test_image_key_depends_on_kind(self):
        data = "data:image/png;base64,AAAA"
        assert image_analysis_key(data, "image_analysis") != image_analysis_key(
            data, "sketch_analysis"
        )

    def test_voice_key_depends_on_voice(self):
        assert voice_synthesis_key("hello", "v1") != voice_synthesis_key("hello", "v2")
