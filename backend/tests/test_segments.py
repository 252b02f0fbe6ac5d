"""
Tests for the segment splitter.
"""

import pytest

from services.segments import split


class TestSplit:
    """Splitting reply text into display segments."""

    def test_splits_on_pipe_in_order(self):
        assert split("first|second|third") == ["first", "second", "third"]

    def test_trims_each_segment(self):
        assert split("  hello  |  world ") == ["hello", "world"]

    def test_drops_empty_segments(self):
        assert split("a||b| |c|") == ["a", "b", "c"]

    def test_single_segment_is_trimmed_original(self):
        assert split("  just one line  ") == ["just one line"]

    @pytest.mark.parametrize("text", ["", "   ", "|", " | | "])
    def test_blank_input_yields_nothing(self, text):
        assert split(text) == []

    @pytest.mark.parametrize("value", [None, 42, ["a|b"], {"text": "a|b"}])
    def test_non_string_input_yields_nothing(self, value):
        assert split(value) == []

    def test_no_whitespace_only_segments(self):
        text = "one|\t|\n| two |   |three"
        parts = split(text)
        assert parts == ["one", "two", "three"]
        assert all(p.strip() for p in parts)

    def test_keeps_internal_whitespace_and_unicode(self):
        assert split("héllo  wörld|日本語") == ["héllo  wörld", "日本語"]
