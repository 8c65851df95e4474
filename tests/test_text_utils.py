"""Tests for grapheme-aware truncation."""

import pytest

from jobwatch.util.text_utils import grapheme_length, iter_graphemes, truncate_graphemes

FAMILY = "\U0001F468\u200d\U0001F469\u200d\U0001F467"  # man, ZWJ, woman, ZWJ, girl
FLAG = "\U0001F1FA\U0001F1F8"  # regional indicators U+S
E_ACUTE = "e\u0301"  # e + combining acute accent


class TestTruncateGraphemes:
    def test_short_text_unchanged(self):
        assert truncate_graphemes("hello", 512) == "hello"

    def test_ascii_truncation(self):
        assert truncate_graphemes("abcdef", 3) == "abc"

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit(self, limit):
        assert truncate_graphemes("abc", limit) == ""

    def test_empty_text(self):
        assert truncate_graphemes("", 10) == ""

    def test_zwj_sequence_kept_whole(self):
        text = "ab" + FAMILY + "cd"
        assert truncate_graphemes(text, 3) == "ab" + FAMILY
        assert truncate_graphemes(text, 2) == "ab"

    def test_flag_not_split(self):
        assert truncate_graphemes(FLAG + FLAG, 1) == FLAG

    def test_combining_mark_stays_with_base(self):
        text = E_ACUTE * 4
        assert truncate_graphemes(text, 2) == E_ACUTE * 2

    @pytest.mark.parametrize("cluster", [FAMILY, FLAG, E_ACUTE, "\U0001F44D\U0001F3FD"])
    @pytest.mark.parametrize("limit", [1, 2, 3, 7])
    def test_last_cluster_fully_included_or_excluded(self, cluster, limit):
        text = ("x" + cluster) * 5
        truncated = truncate_graphemes(text, limit)
        assert text.startswith(truncated)
        assert list(iter_graphemes(truncated)) == list(iter_graphemes(text))[:limit]


def test_grapheme_length_counts_clusters():
    assert grapheme_length("a" + FAMILY + E_ACUTE + FLAG) == 4
