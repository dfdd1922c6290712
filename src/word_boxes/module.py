from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from contracts.words import SegmentKind, WordRecord
from layout_engine import EngineConfig, compile_document, get_engine

from .artifacts import commit_outputs, encode_png, serialize_layout, serialize_word_records
from .composer import check_renderable, extract_words, render_rasters
from .config import ExtractionConfig
from .data_access import check_distinct, check_input_file, check_output_file
from .projector import check_resolution

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExtractionOutputs:
    words_json: Path
    render: Path | None = None  # plain raster
    render_boxes: Path | None = None  # raster with word boxes
    layout_json: Path | None = None  # compiled frame tree

    def targets(self) -> list[Path]:
        return [p for p in (self.words_json, self.render, self.render_boxes, self.layout_json) if p is not None]

    @property
    def wants_raster(self) -> bool:
        return self.render is not None or self.render_boxes is not None


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    backend: str
    page_count: int
    records: list[WordRecord]
    written: list[Path] = field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        counts = {k.value: 0 for k in SegmentKind}
        for r in self.records:
            counts[r.kind.value] += 1
        return {
            "ok": True,
            "backend": self.backend,
            "pages": self.page_count,
            "records": len(self.records),
            "kinds": counts,
            "written": [str(p) for p in self.written],
        }


def run_extraction(
    *,
    source_file: Path,
    outputs: ExtractionOutputs,
    config: ExtractionConfig,
    engine_config: EngineConfig | None = None,
) -> ExtractionResult:
    """
    Preferred programmatic entrypoint: compile, extract, render, then commit.

    Configuration and paths are checked before compilation; nothing is written
    unless every step succeeds, and then all outputs are written together.
    """

    engine_config = engine_config or EngineConfig()
    config.validate()
    engine_config.validate()
    check_resolution(config.resolution)

    source = check_input_file(source_file)
    check_distinct([source, *outputs.targets()])
    for target in outputs.targets():
        check_output_file(target)

    engine = get_engine(engine_config, source_file=source)
    compiled = compile_document(engine=engine, source_file=source)
    document = compiled.document

    if outputs.wants_raster:
        check_renderable(document)

    records = extract_words(document, config)

    payloads: dict[Path, bytes] = {outputs.words_json: serialize_word_records(records).encode("utf-8")}
    if outputs.layout_json is not None:
        payloads[outputs.layout_json] = serialize_layout(document).encode("utf-8")

    if outputs.wants_raster:
        page_images = engine.render_pages(compiled=compiled, resolution=config.resolution)
        plain, annotated = render_rasters(page_images, records, resolution=config.resolution)
        if outputs.render is not None:
            payloads[outputs.render] = encode_png(plain)
        if outputs.render_boxes is not None:
            payloads[outputs.render_boxes] = encode_png(annotated)

    written = commit_outputs(payloads)
    return ExtractionResult(
        backend=compiled.backend,
        page_count=len(document.pages),
        records=records,
        written=written,
    )
