"""
Word-box extraction: walk a compiled layout tree and emit one pixel-space
bounding box per word.

- segmentation of glyph runs into word / delimiter / whitespace segments
- iterative tree walk with accumulated affine transforms
- projection of local boxes to axis-aligned pixel envelopes

No typesetting and no OCR; layout trees come from `layout_engine`.
The end-to-end entrypoint is `word_boxes.module.run_extraction`.
"""

from .config import DEFAULT_DPI, ExtractionConfig
from .segmenter import DEFAULT_RULES, Segment, SegmenterRules, emitted_segments, segment_clusters

__all__ = [
    "DEFAULT_DPI",
    "DEFAULT_RULES",
    "ExtractionConfig",
    "Segment",
    "SegmenterRules",
    "emitted_segments",
    "segment_clusters",
]
