"""
Layout engines: compile a source document into a frame tree and rasterize it.

This package treats the typesetter as an external collaborator:
- It produces fully materialized `contracts.layout.Document` trees.
- It renders pages to raster images deterministically.
- It performs NO word segmentation and NO bounding-box projection.
"""

from .contracts import CompiledDocument, EngineConfig, EngineName
from .module import compile_document, get_engine, resolve_engine_name

__all__ = [
    "CompiledDocument",
    "EngineConfig",
    "EngineName",
    "compile_document",
    "get_engine",
    "resolve_engine_name",
]
