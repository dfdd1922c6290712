from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from contracts.errors import ConfigurationError
from contracts.layout import Document


class EngineName(str, Enum):
    """
    Layout backends: each one compiles a source file into a frame tree and
    rasterizes its pages.
    """

    AUTO = "auto"
    TYPST = "typst"
    PDF = "pdf"
    PLAINTEXT = "plaintext"
    LAYOUT_JSON = "layout-json"


@dataclass(frozen=True, slots=True)
class EngineConfig:
    engine: EngineName = EngineName.AUTO
    typst_bin: str = "typst"  # resolved on PATH by subprocess
    timeout_s: float = 120.0

    def validate(self) -> None:
        if not isinstance(self.engine, EngineName):
            raise ConfigurationError("engine must be an EngineName", detail={"engine": self.engine})
        if not self.typst_bin:
            raise ConfigurationError("typst_bin must not be empty")
        if not math.isfinite(self.timeout_s) or self.timeout_s <= 0:
            raise ConfigurationError(
                "timeout_s must be a positive finite number", detail={"timeout_s": self.timeout_s}
            )


@dataclass(frozen=True, slots=True)
class CompiledDocument:
    """
    Output of a layout engine.

    `document` is fully materialized and read-only from here on; `payload` is
    engine-private data needed for rasterization (e.g. the PDF bytes).
    """

    document: Document
    backend: str
    payload: bytes | None = None
    meta: dict[str, Any] = field(default_factory=dict)
