from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from .errors import MalformedLayoutError


@dataclass(frozen=True, slots=True)
class Transform:
    """
    2D affine map in the PDF/typst row-vector convention:

        x' = a*x + c*y + e
        y' = b*x + d*y + f
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @staticmethod
    def identity() -> "Transform":
        return Transform()

    @staticmethod
    def translate(tx: float, ty: float) -> "Transform":
        return Transform(e=float(tx), f=float(ty))

    @staticmethod
    def scale(sx: float, sy: float) -> "Transform":
        return Transform(a=float(sx), d=float(sy))

    @staticmethod
    def rotate(radians: float) -> "Transform":
        # Counter-clockwise in a y-up space, clockwise on a y-down page.
        cos = math.cos(radians)
        sin = math.sin(radians)
        return Transform(a=cos, b=sin, c=-sin, d=cos)

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self.to_list())

    def linear_scale(self) -> float:
        """Geometric-mean scale factor of the linear part (sqrt(|det|))."""
        return math.sqrt(abs(self.a * self.d - self.b * self.c))

    def to_list(self) -> list[float]:
        return [self.a, self.b, self.c, self.d, self.e, self.f]

    @staticmethod
    def from_list(values: Any) -> "Transform":
        if not isinstance(values, (list, tuple)) or len(values) != 6:
            raise TypeError("transform must be a list of 6 numbers [a, b, c, d, e, f]")
        a, b, c, d, e, f = (float(v) for v in values)
        return Transform(a=a, b=b, c=c, d=d, e=e, f=f)


def compose(parent: Transform, child: Transform) -> Transform:
    """
    Effective transform of a child frame: `child` is applied first, then `parent`.

    Pure and total. Singular or degenerate matrices are passed through as-is; the
    projector only ever applies transforms forward, it never inverts them.
    """

    return Transform(
        a=parent.a * child.a + parent.c * child.b,
        b=parent.b * child.a + parent.d * child.b,
        c=parent.a * child.c + parent.c * child.d,
        d=parent.b * child.c + parent.d * child.d,
        e=parent.a * child.e + parent.c * child.f + parent.e,
        f=parent.b * child.e + parent.d * child.f + parent.f,
    )


def accumulate(chain: Iterable[Transform]) -> Transform:
    """Fold a root-to-leaf chain of local transforms into one effective transform."""
    out = Transform.identity()
    for t in chain:
        out = compose(out, t)
    return out


class FrameKind(str, Enum):
    GROUP = "group"
    TEXT = "text"
    SHAPE = "shape"


def _opt_float(v: Any) -> float | None:
    return None if v is None else float(v)


def _require_object(d: Any, what: str) -> dict[str, Any]:
    if not isinstance(d, dict):
        raise TypeError(f"{what} must be a JSON object, got {type(d).__name__}")
    return d


@dataclass(frozen=True, slots=True)
class Glyph:
    """
    One shaped glyph of a text run.

    `x`/`y` is the pen position relative to the run origin (y-down, baseline at y).
    `text` is the source character(s) the glyph stands for; a ligature may map to
    several characters and a synthesized glyph to none.
    """

    x: float | None
    y: float | None
    advance: float | None
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "advance": self.advance, "text": self.text}

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Glyph":
        d = _require_object(d, "Glyph")
        return Glyph(
            x=_opt_float(d.get("x")),
            y=_opt_float(d.get("y", 0.0)),
            advance=_opt_float(d.get("advance")),
            text=str(d.get("text", "")),
        )


@dataclass(frozen=True, slots=True)
class TextRun:
    glyphs: list[Glyph]
    font_size: float
    ascender: float  # distance above the baseline (positive)
    descender: float  # signed offset below the baseline (normally negative)

    def text(self) -> str:
        return "".join(g.text for g in self.glyphs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "font_size": self.font_size,
            "ascender": self.ascender,
            "descender": self.descender,
            "glyphs": [g.to_dict() for g in self.glyphs],
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "TextRun":
        d = _require_object(d, "TextRun")
        glyphs_raw = d.get("glyphs") or []
        if not isinstance(glyphs_raw, list):
            raise TypeError("TextRun.glyphs must be a list")
        return TextRun(
            glyphs=[Glyph.from_dict(g) for g in glyphs_raw],
            font_size=float(d["font_size"]),
            ascender=float(d["ascender"]),
            descender=float(d["descender"]),
        )


@dataclass(frozen=True, slots=True)
class Shape:
    width: float
    height: float
    fill: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"width": self.width, "height": self.height, "fill": self.fill}

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Shape":
        d = _require_object(d, "Shape")
        return Shape(
            width=float(d["width"]),
            height=float(d["height"]),
            fill=(None if d.get("fill") is None else str(d["fill"])),
        )


@dataclass(frozen=True, slots=True)
class Frame:
    """
    Layout tree node, stored in a per-page arena.

    Groups own child indices (paint order); leaves hold a TextRun or a Shape.
    `transform` maps this frame's local space into its parent's space.
    """

    kind: FrameKind
    transform: Transform = field(default_factory=Transform.identity)
    children: tuple[int, ...] = ()
    text: TextRun | None = None
    shape: Shape | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"kind": self.kind.value, "transform": self.transform.to_list()}
        if self.kind == FrameKind.GROUP:
            out["children"] = list(self.children)
        if self.text is not None:
            out["text"] = self.text.to_dict()
        if self.shape is not None:
            out["shape"] = self.shape.to_dict()
        return out

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Frame":
        d = _require_object(d, "Frame")
        kind = FrameKind(str(d["kind"]))
        children_raw = d.get("children") or []
        if not isinstance(children_raw, list):
            raise TypeError("Frame.children must be a list")
        return Frame(
            kind=kind,
            transform=Transform.from_list(d.get("transform", [1, 0, 0, 1, 0, 0])),
            children=tuple(int(c) for c in children_raw),
            text=(None if d.get("text") is None else TextRun.from_dict(d["text"])),
            shape=(None if d.get("shape") is None else Shape.from_dict(d["shape"])),
        )


@dataclass(frozen=True, slots=True)
class Page:
    width: float
    height: float
    frames: list[Frame]
    root: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "root": self.root,
            "frames": [f.to_dict() for f in self.frames],
        }

    @staticmethod
    def from_dict(d: dict[str, Any], *, page_index: int = 0) -> "Page":
        frames_raw = d.get("frames") or []
        if not isinstance(frames_raw, list):
            raise MalformedLayoutError("Page.frames must be a list", detail={"page_index": page_index})

        frames: list[Frame] = []
        for frame_index, raw in enumerate(frames_raw):
            try:
                frames.append(Frame.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedLayoutError(
                    "Invalid frame in layout tree",
                    detail={"page_index": page_index, "frame_index": frame_index, "error": repr(e)},
                ) from e

        try:
            return Page(
                width=float(d["width"]),
                height=float(d["height"]),
                frames=frames,
                root=int(d.get("root", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedLayoutError(
                "Invalid page header in layout tree",
                detail={"page_index": page_index, "error": repr(e)},
            ) from e


@dataclass(frozen=True, slots=True)
class Document:
    pages: list[Page]

    def to_dict(self) -> dict[str, Any]:
        return {"version": LAYOUT_FORMAT_VERSION, "pages": [p.to_dict() for p in self.pages]}

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Document":
        if not isinstance(d, dict):
            raise MalformedLayoutError("Layout document must be a JSON object")
        version = d.get("version", LAYOUT_FORMAT_VERSION)
        if version != LAYOUT_FORMAT_VERSION:
            raise MalformedLayoutError(
                "Unsupported layout format version",
                detail={"version": version, "supported": LAYOUT_FORMAT_VERSION},
            )
        pages_raw = d.get("pages") or []
        if not isinstance(pages_raw, list):
            raise MalformedLayoutError("Layout document pages must be a list")
        pages: list[Page] = []
        for page_index, raw in enumerate(pages_raw):
            if not isinstance(raw, dict):
                raise MalformedLayoutError("Page entry must be an object", detail={"page_index": page_index})
            pages.append(Page.from_dict(raw, page_index=page_index))
        return Document(pages=pages)


LAYOUT_FORMAT_VERSION = 1
