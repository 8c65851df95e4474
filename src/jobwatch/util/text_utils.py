"""Text helpers for building moderator-facing summaries."""

from __future__ import annotations

import regex

# \X matches one extended grapheme cluster (UAX #29)
_GRAPHEME = regex.compile(r"\X")


def iter_graphemes(text: str):
    """Yield the user-perceived characters of ``text`` one cluster at a time."""
    for match in _GRAPHEME.finditer(text):
        yield match.group()


def grapheme_length(text: str) -> int:
    """Return the number of grapheme clusters in ``text``."""
    return sum(1 for _ in iter_graphemes(text))


def truncate_graphemes(text: str, limit: int) -> str:
    """
    Return at most ``limit`` grapheme clusters from the start of ``text``.

    Cutting on cluster boundaries keeps emoji sequences, flags and letters with
    combining marks whole; a cluster is either kept entirely or dropped.

    Args:
        text: Input string.
        limit: Maximum number of clusters to keep. Negative values count as 0.

    Returns:
        The truncated prefix of ``text``.
    """
    if limit <= 0:
        return ""

    clusters = []
    for cluster in iter_graphemes(text):
        if len(clusters) == limit:
            break
        clusters.append(cluster)
    return "".join(clusters)
