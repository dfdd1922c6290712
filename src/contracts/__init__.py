"""
Canonical contracts shared by the layout engines and the word-box extractor.

- `layout`: the compiled document as a per-page arena of frames
- `words`: the emitted per-word bounding box records
- `errors`: the fatal error taxonomy

Engines and the extractor consume/produce these contract objects (not ad-hoc dicts).
"""

from .errors import (
    CompilationError,
    ConfigurationError,
    MalformedLayoutError,
    OutputIOError,
    WordBoxError,
)
from .layout import Document, Frame, FrameKind, Glyph, Page, Shape, TextRun, Transform, accumulate, compose
from .words import BBox, SegmentKind, WordRecord

__all__ = [
    "BBox",
    "CompilationError",
    "ConfigurationError",
    "Document",
    "Frame",
    "FrameKind",
    "Glyph",
    "MalformedLayoutError",
    "OutputIOError",
    "Page",
    "SegmentKind",
    "Shape",
    "TextRun",
    "Transform",
    "WordBoxError",
    "WordRecord",
    "accumulate",
    "compose",
]
