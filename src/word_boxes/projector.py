from __future__ import annotations

import math

from contracts.errors import ConfigurationError
from contracts.layout import Transform
from contracts.words import BBox, WordRecord

from .walker import LocalBox, LocalWord


def check_resolution(resolution: float) -> None:
    if isinstance(resolution, bool) or not isinstance(resolution, (int, float)):
        raise ConfigurationError("resolution must be a number", detail={"resolution": resolution})
    if not math.isfinite(resolution) or resolution <= 0:
        raise ConfigurationError(
            "resolution must be a positive finite number", detail={"resolution": resolution}
        )


def project_box(box: LocalBox, transform: Transform, resolution: float) -> BBox:
    """
    Map a run-local box into page pixels.

    The four corners go through the effective transform and are scaled by the
    resolution; the result is their axis-aligned envelope. For transforms without
    rotation or skew this is the exact rectangle; rotated boxes get a looser
    enclosing rectangle.
    """

    corners = (
        transform.apply(box.x0, box.y0),
        transform.apply(box.x1, box.y0),
        transform.apply(box.x1, box.y1),
        transform.apply(box.x0, box.y1),
    )
    xs = [x * resolution for x, _ in corners]
    ys = [y * resolution for _, y in corners]
    x0 = min(xs)
    y0 = min(ys)
    return BBox(x=x0, y=y0, width=max(xs) - x0, height=max(ys) - y0)


def project_word(word: LocalWord, resolution: float) -> WordRecord:
    return WordRecord(
        page=word.page_index,
        text=word.text,
        kind=word.kind,
        bbox=project_box(word.box, word.transform, resolution),
    )


def project_words(words: list[LocalWord], resolution: float) -> list[WordRecord]:
    check_resolution(resolution)
    return [project_word(w, resolution) for w in words]
