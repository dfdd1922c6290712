from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from PIL import Image

from ..contracts import CompiledDocument


class LayoutEngine(ABC):
    """
    Document compiler + rasterizer abstraction.

    Engines must:
    - Compile a source file into a fully materialized frame tree
      (`contracts.layout.Document`), raising `CompilationError` on failure
    - Rasterize pages deterministically for a given resolution
    - Perform NO word segmentation or box projection
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    def backend_version(self) -> str | None:
        return None

    @abstractmethod
    def compile(self, *, source_file: Path) -> CompiledDocument:
        raise NotImplementedError

    @abstractmethod
    def render_pages(self, *, compiled: CompiledDocument, resolution: float) -> list[Image.Image]:
        """
        Return one RGB image per page, in page order, at `resolution` pixels per point.
        """

        raise NotImplementedError
