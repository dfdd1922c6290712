from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from contracts.errors import MalformedLayoutError
from contracts.layout import Document, Frame, FrameKind, Page, TextRun, Transform
from contracts.words import SegmentKind

from .segmenter import DEFAULT_RULES, SegmenterRules, emitted_segments
from .transform import compose

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LocalBox:
    """Run-local extents (y-down): x0 <= x1, y0 <= y1."""

    x0: float
    y0: float
    x1: float
    y1: float


@dataclass(frozen=True, slots=True)
class LocalWord:
    page_index: int
    frame_index: int
    text: str
    kind: SegmentKind
    box: LocalBox
    transform: Transform  # effective transform of the enclosing text frame


def _is_num(v: object) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def _frame_at(page: Page, index: int, *, page_index: int, parent_index: int | None) -> Frame:
    if isinstance(index, bool) or not isinstance(index, int) or not (0 <= index < len(page.frames)):
        raise MalformedLayoutError(
            "Frame index out of range",
            detail={
                "page_index": page_index,
                "frame_index": index,
                "parent_frame_index": parent_index,
                "frame_count": len(page.frames),
            },
        )
    return page.frames[index]


def _check_frame(frame: Frame, *, page_index: int, frame_index: int) -> None:
    ctx = {"page_index": page_index, "frame_index": frame_index, "kind": getattr(frame.kind, "value", frame.kind)}

    if not isinstance(frame.transform, Transform) or not frame.transform.is_finite():
        raise MalformedLayoutError("Frame transform is missing or not finite", detail=ctx)

    if frame.kind == FrameKind.GROUP:
        if frame.children is None:
            raise MalformedLayoutError("Group frame has no children list", detail=ctx)
        return
    if frame.children:
        raise MalformedLayoutError("Leaf frame must not have children", detail=ctx)
    if frame.kind == FrameKind.TEXT:
        if frame.text is None:
            raise MalformedLayoutError("Text frame has no text run", detail=ctx)
        return
    if frame.kind == FrameKind.SHAPE:
        if frame.shape is None:
            raise MalformedLayoutError("Shape frame has no shape", detail=ctx)
        return
    raise MalformedLayoutError("Unknown frame kind", detail=ctx)


def _check_run(run: TextRun, *, page_index: int, frame_index: int) -> None:
    if not (_is_num(run.ascender) and _is_num(run.descender) and _is_num(run.font_size)):
        raise MalformedLayoutError(
            "Text run metrics are missing or not finite",
            detail={
                "page_index": page_index,
                "frame_index": frame_index,
                "ascender": run.ascender,
                "descender": run.descender,
                "font_size": run.font_size,
            },
        )
    for glyph_index, g in enumerate(run.glyphs):
        if not (_is_num(g.x) and _is_num(g.y)):
            raise MalformedLayoutError(
                "Glyph has no finite position",
                detail={"page_index": page_index, "frame_index": frame_index, "glyph_index": glyph_index},
            )
        if not _is_num(g.advance):
            raise MalformedLayoutError(
                "Glyph has no finite advance",
                detail={"page_index": page_index, "frame_index": frame_index, "glyph_index": glyph_index},
            )
        if not isinstance(g.text, str):
            raise MalformedLayoutError(
                "Glyph text must be a string",
                detail={"page_index": page_index, "frame_index": frame_index, "glyph_index": glyph_index},
            )


def _words_in_run(
    run: TextRun,
    effective: Transform,
    *,
    page_index: int,
    frame_index: int,
    include_delimiters: bool,
    include_whitespace: bool,
    rules: SegmenterRules,
) -> list[LocalWord]:
    _check_run(run, page_index=page_index, frame_index=frame_index)

    glyphs = run.glyphs
    segments = emitted_segments(
        [g.text for g in glyphs],
        include_delimiters=include_delimiters,
        include_whitespace=include_whitespace,
        rules=rules,
    )

    words: list[LocalWord] = []
    for seg in segments:
        seg_glyphs = glyphs[seg.start : seg.end]
        x0 = min(min(g.x, g.x + g.advance) for g in seg_glyphs)
        x1 = max(max(g.x, g.x + g.advance) for g in seg_glyphs)
        y0 = min(g.y for g in seg_glyphs) - run.ascender
        y1 = max(g.y for g in seg_glyphs) - run.descender
        if y1 < y0:
            # Inverted metrics (ascender below descender); keep the box well-formed.
            y0, y1 = y1, y0
        words.append(
            LocalWord(
                page_index=page_index,
                frame_index=frame_index,
                text=seg.text,
                kind=seg.kind,
                box=LocalBox(x0=x0, y0=y0, x1=x1, y1=y1),
                transform=effective,
            )
        )
    return words


def walk_page(
    page: Page,
    *,
    page_index: int,
    include_delimiters: bool = False,
    include_whitespace: bool = False,
    rules: SegmenterRules = DEFAULT_RULES,
) -> list[LocalWord]:
    """
    Depth-first, paint-order traversal of one page's frame arena.

    Every frame is composed against the effective transform of its own parent,
    passed down by value, so transforms never leak between sibling subtrees.
    A frame reachable more than once (shared node or cycle) is malformed.
    """

    if not page.frames:
        return []

    words: list[LocalWord] = []
    visited: set[int] = set()

    # Explicit stack of (frame index, parent index, parent effective transform).
    _frame_at(page, page.root, page_index=page_index, parent_index=None)
    stack: list[tuple[int, int | None, Transform]] = [(page.root, None, Transform.identity())]

    while stack:
        index, parent_index, parent_tf = stack.pop()
        frame = _frame_at(page, index, page_index=page_index, parent_index=parent_index)
        if index in visited:
            raise MalformedLayoutError(
                "Frame is reachable more than once (cycle or shared node)",
                detail={"page_index": page_index, "frame_index": index, "parent_frame_index": parent_index},
            )
        visited.add(index)
        _check_frame(frame, page_index=page_index, frame_index=index)

        effective = compose(parent_tf, frame.transform)

        if frame.kind == FrameKind.GROUP:
            for child in reversed(frame.children):
                stack.append((child, index, effective))
        elif frame.kind == FrameKind.TEXT:
            words.extend(
                _words_in_run(
                    frame.text,
                    effective,
                    page_index=page_index,
                    frame_index=index,
                    include_delimiters=include_delimiters,
                    include_whitespace=include_whitespace,
                    rules=rules,
                )
            )
        # Shapes are visited but carry no words.

    logger.debug("page %d: visited %d frames, %d words", page_index, len(visited), len(words))
    return words


def walk_document(
    document: Document,
    *,
    include_delimiters: bool = False,
    include_whitespace: bool = False,
    rules: SegmenterRules = DEFAULT_RULES,
) -> list[LocalWord]:
    words: list[LocalWord] = []
    for page_index, page in enumerate(document.pages):
        words.extend(
            walk_page(
                page,
                page_index=page_index,
                include_delimiters=include_delimiters,
                include_whitespace=include_whitespace,
                rules=rules,
            )
        )
    return words
