from __future__ import annotations

import json
from pathlib import Path

from PIL import Image

from contracts.errors import CompilationError
from contracts.layout import Document

from ..contracts import CompiledDocument
from ..raster import render_page_tree
from .base import LayoutEngine


class LayoutJsonEngine(LayoutEngine):
    """
    Loads an already-compiled layout tree serialized in the `contracts.layout`
    dict form (e.g. written by `word-boxes extract --dump-layout`).
    """

    def backend_id(self) -> str:
        return "layout-json"

    def compile(self, *, source_file: Path) -> CompiledDocument:
        try:
            raw = json.loads(source_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CompilationError(
                "Failed to load layout JSON",
                detail={"source_file": str(source_file), "error": str(e)},
            ) from e

        # Structural problems surface as MalformedLayoutError from the contract.
        document = Document.from_dict(raw)
        return CompiledDocument(document=document, backend=self.backend_id())

    def render_pages(self, *, compiled: CompiledDocument, resolution: float) -> list[Image.Image]:
        return [render_page_tree(p, resolution) for p in compiled.document.pages]
