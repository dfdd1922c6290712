"""
Frame tree reconstruction from a PDF via PDFium.

Each PDF text object becomes one text frame. The page root flips PDF user space
(y-up, bottom-left origin) into page space (y-down, top-left origin); each text
frame maps run-local coordinates (y-down, baseline at y=0, x along the baseline)
into PDF user space through translate(origin) * rotate(angle) * flip.

PDFium synthesizes characters that are not in the content stream: generated
line breaks end the current run, generated spaces join it.
"""

from __future__ import annotations

import ctypes
import math
from dataclasses import dataclass
from typing import Any

from contracts.errors import MalformedLayoutError
from contracts.layout import Document, Frame, FrameKind, Glyph, Page, TextRun, Transform, accumulate

_LINE_BREAKS = ("\r", "\n")
_FLIP_Y = Transform.scale(1.0, -1.0)


def require_pdfium():
    try:
        import pypdfium2 as pdfium  # type: ignore
        import pypdfium2.raw as pdfium_c  # type: ignore

        return pdfium, pdfium_c
    except ImportError as e:
        raise RuntimeError("Missing dependency: pypdfium2 is required for PDF layout extraction.") from e


@dataclass(frozen=True, slots=True)
class _Char:
    text: str
    origin: tuple[float, float]
    box: tuple[float, float, float, float]  # left, bottom, right, top
    loose_box: tuple[float, float, float, float]
    angle: float
    font_size: float
    generated: bool


def _read_char(pdfium_c: Any, textpage: Any, index: int, *, page_index: int) -> _Char:
    code = pdfium_c.FPDFText_GetUnicode(textpage.raw, index)
    x = ctypes.c_double()
    y = ctypes.c_double()
    if not pdfium_c.FPDFText_GetCharOrigin(textpage.raw, index, ctypes.byref(x), ctypes.byref(y)):
        raise MalformedLayoutError(
            "PDF character has no origin", detail={"page_index": page_index, "char_index": index}
        )
    angle = float(pdfium_c.FPDFText_GetCharAngle(textpage.raw, index))
    return _Char(
        text=chr(code) if code else "",
        origin=(x.value, y.value),
        box=tuple(textpage.get_charbox(index)),
        loose_box=tuple(textpage.get_charbox(index, loose=True)),
        angle=angle if angle >= 0 else 0.0,  # -1 signals an error in PDFium
        font_size=float(pdfium_c.FPDFText_GetFontSize(textpage.raw, index)),
        generated=pdfium_c.FPDFText_IsGenerated(textpage.raw, index) == 1,
    )


def _object_key(pdfium_c: Any, textpage: Any, index: int) -> int | None:
    obj = pdfium_c.FPDFText_GetTextObject(textpage.raw, index)
    if not obj:
        return None
    return ctypes.cast(obj, ctypes.c_void_p).value


def _collect_runs(pdfium_c: Any, textpage: Any, *, page_index: int) -> list[list[_Char]]:
    runs: list[list[_Char]] = []
    cur: list[_Char] = []
    cur_key: int | None = None

    def flush() -> None:
        nonlocal cur, cur_key
        if cur:
            runs.append(cur)
        cur = []
        cur_key = None

    for i in range(textpage.count_chars()):
        ch = _read_char(pdfium_c, textpage, i, page_index=page_index)
        if ch.text in _LINE_BREAKS:
            flush()
            continue

        key = _object_key(pdfium_c, textpage, i)
        if key is None or ch.generated:
            # Synthesized spacing belongs to the run it sits in; never starts one.
            if cur:
                cur.append(ch)
            continue
        if key != cur_key:
            flush()
            cur_key = key
        cur.append(ch)

    flush()
    return runs


def _box_corners(box: tuple[float, float, float, float]) -> list[tuple[float, float]]:
    left, bottom, right, top = box
    return [(left, bottom), (right, bottom), (right, top), (left, top)]


def _run_frame(chars: list[_Char]) -> Frame:
    first = chars[0]
    ox, oy = first.origin
    cos = math.cos(first.angle)
    sin = math.sin(first.angle)

    def to_local(px: float, py: float) -> tuple[float, float]:
        dx = px - ox
        dy = py - oy
        return (cos * dx + sin * dy, -(-sin * dx + cos * dy))

    # Pen positions along the baseline. Generated characters have no pen of their
    # own; they start where their box starts and sit on the previous baseline.
    pens: list[tuple[float, float]] = []
    for ch in chars:
        if ch.generated:
            box_x = min(to_local(px, py)[0] for px, py in _box_corners(ch.box))
            pens.append((box_x, pens[-1][1] if pens else 0.0))
        else:
            pens.append(to_local(*ch.origin))

    glyphs: list[Glyph] = []
    ascender = 0.0
    descender = 0.0
    for i, ch in enumerate(chars):
        gx, gy = pens[i]
        if i + 1 < len(chars):
            advance = pens[i + 1][0] - gx
        else:
            right = max(to_local(px, py)[0] for box in (ch.box, ch.loose_box) for px, py in _box_corners(box))
            advance = max(right - gx, 0.0)
        glyphs.append(Glyph(x=gx, y=gy, advance=advance, text=ch.text))
        if not ch.generated:
            ys = [to_local(px, py)[1] for px, py in _box_corners(ch.loose_box)]
            ascender = max(ascender, gy - min(ys))
            descender = min(descender, gy - max(ys))

    transform = accumulate([Transform.translate(ox, oy), Transform.rotate(first.angle), _FLIP_Y])
    return Frame(
        kind=FrameKind.TEXT,
        transform=transform,
        text=TextRun(glyphs=glyphs, font_size=first.font_size, ascender=ascender, descender=descender),
    )


def read_page_layout(pdfium_c: Any, page: Any, *, page_index: int) -> Page:
    width, height = page.get_size()
    textpage = page.get_textpage()
    try:
        runs = _collect_runs(pdfium_c, textpage, page_index=page_index)
    finally:
        textpage.close()

    frames = [
        Frame(
            kind=FrameKind.GROUP,
            transform=Transform(a=1.0, b=0.0, c=0.0, d=-1.0, e=0.0, f=float(height)),
            children=tuple(range(1, 1 + len(runs))),
        )
    ]
    frames.extend(_run_frame(chars) for chars in runs)
    return Page(width=float(width), height=float(height), frames=frames, root=0)


def read_pdf_layout(pdf_bytes: bytes) -> Document:
    pdfium, pdfium_c = require_pdfium()
    pdf = pdfium.PdfDocument(pdf_bytes)
    try:
        pages: list[Page] = []
        for page_index in range(len(pdf)):
            page = pdf[page_index]
            try:
                pages.append(read_page_layout(pdfium_c, page, page_index=page_index))
            finally:
                page.close()
        return Document(pages=pages)
    finally:
        pdf.close()
