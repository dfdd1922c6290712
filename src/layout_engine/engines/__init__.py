from .base import LayoutEngine
from .layout_json import LayoutJsonEngine
from .pdfium_engine import PdfiumEngine
from .plaintext import PlainTextEngine
from .typst_cli import TypstCliEngine

__all__ = ["LayoutEngine", "LayoutJsonEngine", "PdfiumEngine", "PlainTextEngine", "TypstCliEngine"]
