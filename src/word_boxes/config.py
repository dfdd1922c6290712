from __future__ import annotations

import math
from dataclasses import dataclass

from contracts.errors import ConfigurationError

from .segmenter import DEFAULT_RULES, SegmenterRules

POINTS_PER_INCH = 72.0
DEFAULT_DPI = 72.0  # 1 pixel per typographic point


@dataclass(frozen=True, slots=True)
class ExtractionConfig:
    """
    Word-box extraction parameters.

    Defaults are explicit constants; nothing here reads the environment.
    `dpi` is the rendering resolution; pixel coordinates are points * dpi / 72.
    """

    include_delimiters: bool = False
    include_whitespace: bool = False
    dpi: float = DEFAULT_DPI
    workers: int = 1
    rules: SegmenterRules = DEFAULT_RULES

    @property
    def resolution(self) -> float:
        """Pixels per document unit (point)."""
        return self.dpi / POINTS_PER_INCH

    def validate(self) -> None:
        if isinstance(self.dpi, bool) or not isinstance(self.dpi, (int, float)):
            raise ConfigurationError("dpi must be a number", detail={"dpi": self.dpi})
        if not math.isfinite(self.dpi) or self.dpi <= 0:
            raise ConfigurationError("dpi must be a positive finite number", detail={"dpi": self.dpi})
        if isinstance(self.workers, bool) or not isinstance(self.workers, int) or self.workers < 1:
            raise ConfigurationError("workers must be an integer >= 1", detail={"workers": self.workers})
