"""
Lexical segmentation of a text run into word / delimiter / whitespace segments.

Character classes (the constants below):
- whitespace: `str.isspace()` (space, tab, line breaks, Unicode separators)
- delimiter: Unicode general category P* or ASCII punctuation (`string.punctuation`,
  which also covers ASCII symbols such as `$+<=>^|~`)
- word: everything else

Segmentation works on glyph clusters, not characters, so a segment boundary can
never split a glyph. A cluster is whitespace if all of its characters are
whitespace, a delimiter if all of them are whitespace or delimiters, and part of
a word otherwise (the empty cluster included).
"""

from __future__ import annotations

import string
import unicodedata
from dataclasses import dataclass
from typing import Sequence

from contracts.words import SegmentKind

DELIMITER_CATEGORIES: frozenset[str] = frozenset({"Pc", "Pd", "Ps", "Pe", "Pi", "Pf", "Po"})
EXTRA_DELIMITERS: frozenset[str] = frozenset(string.punctuation)


@dataclass(frozen=True, slots=True)
class SegmenterRules:
    delimiter_categories: frozenset[str] = DELIMITER_CATEGORIES
    extra_delimiters: frozenset[str] = EXTRA_DELIMITERS


DEFAULT_RULES = SegmenterRules()


@dataclass(frozen=True, slots=True)
class Segment:
    kind: SegmentKind
    start: int  # first cluster index (inclusive)
    end: int  # last cluster index (exclusive)
    text: str


def classify_char(ch: str, rules: SegmenterRules = DEFAULT_RULES) -> SegmentKind:
    if ch.isspace():
        return SegmentKind.WHITESPACE
    if ch in rules.extra_delimiters or unicodedata.category(ch) in rules.delimiter_categories:
        return SegmentKind.DELIMITER
    return SegmentKind.WORD


def classify_cluster(cluster: str, rules: SegmenterRules = DEFAULT_RULES) -> SegmentKind:
    if not cluster:
        return SegmentKind.WORD
    kinds = {classify_char(ch, rules) for ch in cluster}
    if SegmentKind.WORD in kinds:
        return SegmentKind.WORD
    if kinds == {SegmentKind.WHITESPACE}:
        return SegmentKind.WHITESPACE
    return SegmentKind.DELIMITER


def segment_clusters(clusters: Sequence[str], rules: SegmenterRules = DEFAULT_RULES) -> list[Segment]:
    """
    Split a run into maximal same-kind segments covering every cluster exactly once.
    """

    segments: list[Segment] = []
    start = 0
    current: SegmentKind | None = None

    for i, cluster in enumerate(clusters):
        kind = classify_cluster(cluster, rules)
        if current is not None and kind != current:
            segments.append(Segment(kind=current, start=start, end=i, text="".join(clusters[start:i])))
            start = i
        current = kind

    if current is not None:
        segments.append(Segment(kind=current, start=start, end=len(clusters), text="".join(clusters[start:])))

    return segments


def inclusion_table(*, include_delimiters: bool, include_whitespace: bool) -> dict[SegmentKind, bool]:
    return {
        SegmentKind.WORD: True,
        SegmentKind.DELIMITER: include_delimiters,
        SegmentKind.WHITESPACE: include_whitespace,
    }


def emitted_segments(
    clusters: Sequence[str],
    *,
    include_delimiters: bool = False,
    include_whitespace: bool = False,
    rules: SegmenterRules = DEFAULT_RULES,
) -> list[Segment]:
    """Segments that survive the inclusion filters, in source order."""
    keep = inclusion_table(include_delimiters=include_delimiters, include_whitespace=include_whitespace)
    return [s for s in segment_clusters(clusters, rules) if keep[s.kind]]
