from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SegmentKind(str, Enum):
    WORD = "word"
    DELIMITER = "delimiter"
    WHITESPACE = "whitespace"


@dataclass(frozen=True, slots=True)
class BBox:
    """
    Axis-aligned pixel rectangle; (x, y) is the top-left corner.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def x1(self) -> float:
        return self.x + self.width

    @property
    def y1(self) -> float:
        return self.y + self.height

    def offset(self, dx: float, dy: float) -> "BBox":
        return BBox(x=self.x + dx, y=self.y + dy, width=self.width, height=self.height)

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "BBox":
        return BBox(x=float(d["x"]), y=float(d["y"]), width=float(d["width"]), height=float(d["height"]))

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class WordRecord:
    page: int  # 0-indexed
    text: str  # exact source characters of the segment
    kind: SegmentKind
    bbox: BBox

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "WordRecord":
        return WordRecord(
            page=int(d["page"]),
            text=str(d["text"]),
            kind=SegmentKind(str(d["kind"])),
            bbox=BBox.from_dict(d["bbox"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "text": self.text,
            "kind": self.kind.value,
            "bbox": self.bbox.to_dict(),
        }
