"""
Source Ranker - Order normalized sources by descending quality.
"""

import re
from typing import List, Sequence

from anistream.core.models import MediaSource


_NON_DIGITS_RE = re.compile(r"\D+")


def quality_value(label: str) -> int:
    """
    Numeric value of a quality label.

    Every non-digit character is stripped and the rest read as an integer
    ("1080p" -> 1080). Labels without digits ("HD", "auto") count as 0 and
    sort last.
    """
    digits = _NON_DIGITS_RE.sub("", label or "")
    return int(digits) if digits else 0


class SourceRanker:
    """Stable descending sort by quality, deduplicated by URL."""

    def rank(self, sources: Sequence[MediaSource]) -> List[MediaSource]:
        """
        Rank sources best first.

        Equal qualities keep their input order. When two entries share a
        URL only the first one after sorting is kept.

        Args:
            sources: Normalized sources

        Returns:
            New ordered list; empty input gives an empty list
        """
        ordered = sorted(sources, key=lambda source: quality_value(source.quality), reverse=True)

        seen = set()
        ranked = []
        for source in ordered:
            if source.url in seen:
                continue
            seen.add(source.url)
            ranked.append(source)
        return ranked


__all__ = ["SourceRanker", "quality_value"]
