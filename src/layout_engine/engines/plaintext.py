from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

from contracts.errors import CompilationError
from contracts.layout import Document, Frame, FrameKind, Glyph, Page, TextRun, Transform

from ..contracts import CompiledDocument
from ..raster import render_page_tree
from .base import LayoutEngine

logger = logging.getLogger(__name__)

# A4 with 2.5 cm margins, in points.
A4_WIDTH_PT = 595.2756
A4_HEIGHT_PT = 841.8898
MARGIN_PT = 70.8661


class PlainTextEngine(LayoutEngine):
    """
    Minimal fixed-pitch typesetter for UTF-8 plain text.

    Each character is one glyph of `advance_em * font_size` (tabs span
    `tab_width` columns). Lines are hard-wrapped at the text width, pages break
    when full or at a form feed. Every visual line becomes one text frame inside
    a body group offset by the page margins.
    """

    def __init__(
        self,
        *,
        page_width: float = A4_WIDTH_PT,
        page_height: float = A4_HEIGHT_PT,
        margin: float = MARGIN_PT,
        font_size: float = 11.0,
        advance_em: float = 0.6,
        ascender_em: float = 0.8,
        descender_em: float = -0.2,
        line_height_em: float = 1.2,
        tab_width: int = 4,
    ) -> None:
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.font_size = font_size
        self.advance = advance_em * font_size
        self.ascender = ascender_em * font_size
        self.descender = descender_em * font_size
        self.line_height = line_height_em * font_size
        self.tab_width = tab_width

    def backend_id(self) -> str:
        return "plaintext"

    def compile(self, *, source_file: Path) -> CompiledDocument:
        try:
            text = source_file.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise CompilationError(
                "Plain-text source is not valid UTF-8",
                detail={"source_file": str(source_file), "error": str(e)},
            ) from e
        except OSError as e:
            raise CompilationError(
                "Failed to read plain-text source",
                detail={"source_file": str(source_file), "error": repr(e)},
            ) from e

        document = self.layout_text(text)
        logger.debug("plaintext: %s -> %d page(s)", source_file.name, len(document.pages))
        return CompiledDocument(document=document, backend=self.backend_id())

    def render_pages(self, *, compiled: CompiledDocument, resolution: float) -> list[Image.Image]:
        return [render_page_tree(p, resolution) for p in compiled.document.pages]

    def _wrap(self, line: str) -> list[list[Glyph]]:
        text_width = self.page_width - 2 * self.margin
        visual: list[list[Glyph]] = []
        cur: list[Glyph] = []
        x = 0.0
        for ch in line:
            adv = self.advance * (self.tab_width if ch == "\t" else 1)
            if cur and x + adv > text_width:
                visual.append(cur)
                cur = []
                x = 0.0
            cur.append(Glyph(x=x, y=0.0, advance=adv, text=ch))
            x += adv
        if cur:
            visual.append(cur)
        return visual

    def _page(self, rows: list[list[Glyph] | None]) -> Page:
        placed = [(row, glyphs) for row, glyphs in enumerate(rows) if glyphs is not None]
        frames = [
            Frame(kind=FrameKind.GROUP, children=(1,)),
            Frame(
                kind=FrameKind.GROUP,
                transform=Transform.translate(self.margin, self.margin),
                children=tuple(range(2, 2 + len(placed))),
            ),
        ]
        for row, glyphs in placed:
            frames.append(
                Frame(
                    kind=FrameKind.TEXT,
                    transform=Transform.translate(0.0, row * self.line_height + self.ascender),
                    text=TextRun(
                        glyphs=glyphs,
                        font_size=self.font_size,
                        ascender=self.ascender,
                        descender=self.descender,
                    ),
                )
            )
        return Page(width=self.page_width, height=self.page_height, frames=frames, root=0)

    def layout_text(self, text: str) -> Document:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        rows_per_page = max(1, int((self.page_height - 2 * self.margin) // self.line_height))

        pages: list[Page] = []
        for chunk in text.split("\f"):
            rows: list[list[Glyph] | None] = []
            for line in chunk.split("\n"):
                wrapped = self._wrap(line)
                rows.extend(wrapped if wrapped else [None])  # empty line still takes a row

            while rows and rows[-1] is None:
                rows.pop()

            if not rows:
                pages.append(self._page([]))
                continue

            for start in range(0, len(rows), rows_per_page):
                pages.append(self._page(rows[start : start + rows_per_page]))

        return Document(pages=pages)
