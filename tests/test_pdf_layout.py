from __future__ import annotations

import ctypes
import io
import json
import tempfile
import unittest
from pathlib import Path

import pypdfium2 as pdfium
import pypdfium2.raw as pdfium_c

from contracts.layout import FrameKind
from layout_engine.engines import PdfiumEngine
from layout_engine.engines.pdf_layout import read_pdf_layout
from word_boxes.composer import extract_words
from word_boxes.config import ExtractionConfig
from word_boxes.module import ExtractionOutputs, run_extraction

PAGE_SIZE_PT = 300.0
FONT_SIZE = 20.0
# Helvetica advance widths (1/1000 em)
HELLO_WIDTH = (722 + 556 + 222 + 222 + 556) * FONT_SIZE / 1000.0
COMMA_WIDTH = 278 * FONT_SIZE / 1000.0
UPWARD_WIDTH = (556 + 556 + 722 + 556 + 333 + 556) * FONT_SIZE / 1000.0


def _add_text(pdf: pdfium.PdfDocument, page: pdfium.PdfPage, text: str, matrix: tuple[float, ...]) -> None:
    obj = pdfium_c.FPDFPageObj_NewTextObj(pdf.raw, b"Helvetica", ctypes.c_float(FONT_SIZE))
    buf = ctypes.create_string_buffer((text + "\x00").encode("utf-16-le"))
    pdfium_c.FPDFText_SetText(obj, ctypes.cast(buf, pdfium_c.FPDF_WIDESTRING))
    pdfium_c.FPDFPageObj_Transform(obj, *matrix)
    pdfium_c.FPDFPage_InsertObject(page.raw, obj)


def _build_pdf(pages: list[list[tuple[str, tuple[float, ...]]]]) -> bytes:
    pdf = pdfium.PdfDocument.new()
    try:
        for objects in pages:
            page = pdf.new_page(PAGE_SIZE_PT, PAGE_SIZE_PT)
            try:
                for text, matrix in objects:
                    _add_text(pdf, page, text, matrix)
                pdfium_c.FPDFPage_GenerateContent(page.raw)
            finally:
                page.close()
        buf = io.BytesIO()
        pdf.save(buf)
        return buf.getvalue()
    finally:
        pdf.close()


HORIZONTAL_PAGE = [("Hello, world!", (1, 0, 0, 1, 20, 200))]
# 90 degrees counter-clockwise in PDF space: the word reads bottom to top.
ROTATED_PAGE = [("upward", (0, 1, -1, 0, 100, 100))]


class TestPdfLayout(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.pdf_bytes = _build_pdf([HORIZONTAL_PAGE, ROTATED_PAGE])
        cls.document = read_pdf_layout(cls.pdf_bytes)

    def test_pages_and_frames(self) -> None:
        self.assertEqual(len(self.document.pages), 2)
        page = self.document.pages[0]
        self.assertEqual((page.width, page.height), (PAGE_SIZE_PT, PAGE_SIZE_PT))
        root = page.frames[page.root]
        self.assertEqual(root.kind, FrameKind.GROUP)
        texts = [page.frames[i] for i in root.children]
        self.assertEqual([f.text.text() for f in texts], ["Hello, world!"])

    def test_glyphs_follow_pen_positions(self) -> None:
        run = self.document.pages[0].frames[1].text
        self.assertAlmostEqual(run.glyphs[0].x, 0.0, places=3)
        hello = sum(g.advance for g in run.glyphs[:5])
        self.assertAlmostEqual(hello, HELLO_WIDTH, delta=0.05)
        self.assertAlmostEqual(run.glyphs[5].advance, COMMA_WIDTH, delta=0.05)
        for g, nxt in zip(run.glyphs, run.glyphs[1:]):
            self.assertAlmostEqual(g.x + g.advance, nxt.x, places=6)
        self.assertGreater(run.ascender, 0.0)
        self.assertLess(run.descender, 0.0)

    def test_segments_tile_the_run(self) -> None:
        records = [
            r
            for r in extract_words(self.document, ExtractionConfig(include_delimiters=True, include_whitespace=True))
            if r.page == 0
        ]
        self.assertEqual([r.text for r in records], ["Hello", ",", " ", "world", "!"])
        for r, nxt in zip(records, records[1:]):
            self.assertAlmostEqual(r.bbox.x1, nxt.bbox.x, places=6)

        hello = records[0].bbox
        self.assertAlmostEqual(hello.x, 20.0, delta=0.05)
        self.assertAlmostEqual(hello.width, HELLO_WIDTH, delta=0.05)
        # PDF baseline y=200 lands at y=100 on a y-down page
        self.assertLess(hello.y, PAGE_SIZE_PT - 200)
        self.assertGreater(hello.y1, PAGE_SIZE_PT - 200)
        self.assertLess(hello.y1 - (PAGE_SIZE_PT - 200), hello.height / 2)

    def test_rotated_object_envelope(self) -> None:
        records = [r for r in extract_words(self.document, ExtractionConfig()) if r.page == 1]
        self.assertEqual([r.text for r in records], ["upward"])
        box = records[0].bbox
        # reads upward from the PDF origin (100, 100), i.e. y=200 on the page
        self.assertAlmostEqual(box.y1, PAGE_SIZE_PT - 100, delta=0.1)
        self.assertAlmostEqual(box.height, UPWARD_WIDTH, delta=1.0)
        self.assertLess(box.x, 100.0)
        self.assertGreater(box.x1, 100.0)
        self.assertGreater(box.height, 2 * box.width)


class TestPdfiumEngine(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory(prefix="word-boxes-pdf-")
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)
        self.src = self.root / "doc.pdf"
        self.src.write_bytes(_build_pdf([HORIZONTAL_PAGE, ROTATED_PAGE]))

    def test_compile_and_render(self) -> None:
        engine = PdfiumEngine()
        compiled = engine.compile(source_file=self.src)
        self.assertEqual(compiled.backend, "pypdfium2")
        self.assertEqual(len(compiled.document.pages), 2)
        self.assertEqual(compiled.payload, self.src.read_bytes())

        images = engine.render_pages(compiled=compiled, resolution=2.0)
        self.assertEqual([im.size for im in images], [(600, 600), (600, 600)])
        darkest, _ = images[0].convert("L").getextrema()
        self.assertLess(darkest, 128)

    def test_backend_version(self) -> None:
        version = PdfiumEngine().backend_version()
        self.assertIsInstance(version, str)
        self.assertTrue(version)

    def test_run_extraction_on_pdf(self) -> None:
        out = self.root / "words.json"
        boxes = self.root / "boxes.png"
        result = run_extraction(
            source_file=self.src,
            outputs=ExtractionOutputs(words_json=out, render_boxes=boxes),
            config=ExtractionConfig(),
        )
        self.assertEqual(result.backend, "pypdfium2")
        words = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual([(w["page"], w["text"]) for w in words], [(0, "Hello"), (0, "world"), (1, "upward")])
        self.assertTrue(boxes.read_bytes().startswith(b"\x89PNG"))


if __name__ == "__main__":
    unittest.main()
