from __future__ import annotations

import logging
from pathlib import Path

from .contracts import CompiledDocument, EngineConfig, EngineName
from .engines import LayoutEngine, LayoutJsonEngine, PdfiumEngine, PlainTextEngine, TypstCliEngine

logger = logging.getLogger(__name__)

_SUFFIX_ENGINES = {
    ".typ": EngineName.TYPST,
    ".pdf": EngineName.PDF,
    ".json": EngineName.LAYOUT_JSON,
}


def resolve_engine_name(engine: EngineName, *, source_file: Path) -> EngineName:
    """`auto` picks a backend from the file suffix; anything unknown is plain text."""
    if engine != EngineName.AUTO:
        return engine
    return _SUFFIX_ENGINES.get(source_file.suffix.lower(), EngineName.PLAINTEXT)


def get_engine(config: EngineConfig, *, source_file: Path) -> LayoutEngine:
    name = resolve_engine_name(config.engine, source_file=source_file)
    if name == EngineName.TYPST:
        return TypstCliEngine(typst_bin=config.typst_bin, timeout_s=config.timeout_s)
    if name == EngineName.PDF:
        return PdfiumEngine()
    if name == EngineName.PLAINTEXT:
        return PlainTextEngine()
    if name == EngineName.LAYOUT_JSON:
        return LayoutJsonEngine()
    raise ValueError(f"Unsupported layout engine: {name}")


def compile_document(*, engine: LayoutEngine, source_file: Path) -> CompiledDocument:
    compiled = engine.compile(source_file=source_file)
    logger.info(
        "compiled %s with %s: %d page(s)", source_file, engine.backend_id(), len(compiled.document.pages)
    )
    return compiled
