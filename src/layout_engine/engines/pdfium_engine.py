from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

from contracts.errors import CompilationError

from ..contracts import CompiledDocument
from .base import LayoutEngine
from .pdf_layout import read_pdf_layout, require_pdfium

logger = logging.getLogger(__name__)


class PdfiumEngine(LayoutEngine):
    """
    Already-typeset PDFs: frame tree read with PDFium, pages rendered with PDFium.

    PDFium is not thread-safe; callers must not use one engine concurrently.
    """

    def backend_id(self) -> str:
        return "pypdfium2"

    def backend_version(self) -> str | None:
        try:
            from pypdfium2.version import PYPDFIUM_INFO  # type: ignore
        except ImportError:
            return None
        return str(PYPDFIUM_INFO) or None

    def _load_pdf_bytes(self, *, source_file: Path) -> bytes:
        try:
            return source_file.read_bytes()
        except OSError as e:
            raise CompilationError(
                "Failed to read PDF input", detail={"source_file": str(source_file), "error": repr(e)}
            ) from e

    def compile(self, *, source_file: Path) -> CompiledDocument:
        pdf_bytes = self._load_pdf_bytes(source_file=source_file)
        pdfium, _ = require_pdfium()
        try:
            document = read_pdf_layout(pdf_bytes)
        except pdfium.PdfiumError as e:
            raise CompilationError(
                "PDFium could not read the compiled document",
                detail={"source_file": str(source_file), "error": str(e)},
            ) from e

        logger.debug("%s: %s -> %d page(s)", self.backend_id(), source_file.name, len(document.pages))
        return CompiledDocument(
            document=document,
            backend=self.backend_id(),
            payload=pdf_bytes,
            meta={"backend_version": self.backend_version()},
        )

    def render_pages(self, *, compiled: CompiledDocument, resolution: float) -> list[Image.Image]:
        if compiled.payload is None:
            raise ValueError("CompiledDocument has no PDF payload to render")

        pdfium, _ = require_pdfium()
        pdf = pdfium.PdfDocument(compiled.payload)
        try:
            images: list[Image.Image] = []
            for page_index in range(len(pdf)):
                page = pdf[page_index]
                try:
                    bitmap = page.render(scale=resolution)
                    images.append(bitmap.to_pil().convert("RGB"))
                finally:
                    page.close()
            return images
        finally:
            pdf.close()
