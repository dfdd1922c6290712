from __future__ import annotations

import math
from functools import lru_cache

from PIL import Image, ImageDraw, ImageFont

from contracts.layout import Frame, FrameKind, Page, Transform, compose


def page_size_px(page: Page, resolution: float) -> tuple[int, int]:
    return (max(1, math.ceil(page.width * resolution)), max(1, math.ceil(page.height * resolution)))


@lru_cache(maxsize=64)
def _font(size_px: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    return ImageFont.load_default(size=size_px)


def _iter_painted(page: Page):
    """Yield (frame, effective transform) in paint order; skips dangling indices."""
    if not page.frames or not (0 <= page.root < len(page.frames)):
        return
    seen: set[int] = set()
    stack: list[tuple[int, Transform]] = [(page.root, Transform.identity())]
    while stack:
        index, parent_tf = stack.pop()
        if index in seen or not (0 <= index < len(page.frames)):
            continue
        seen.add(index)
        frame = page.frames[index]
        effective = compose(parent_tf, frame.transform)
        yield frame, effective
        if frame.kind == FrameKind.GROUP:
            for child in reversed(frame.children):
                stack.append((child, effective))


def _draw_text(draw: ImageDraw.ImageDraw, frame: Frame, tf: Transform, resolution: float) -> None:
    run = frame.text
    if run is None:
        return
    scale = tf.linear_scale() * resolution
    size_px = max(1, round(run.font_size * scale))
    font = _font(size_px)
    ascent_px = run.ascender * scale
    for g in run.glyphs:
        if not g.text or g.text.isspace() or g.x is None or g.y is None:
            continue
        px, py = tf.apply(g.x, g.y)
        draw.text((px * resolution, py * resolution - ascent_px), g.text, fill=(0, 0, 0), font=font)


def _draw_shape(draw: ImageDraw.ImageDraw, frame: Frame, tf: Transform, resolution: float) -> None:
    shape = frame.shape
    if shape is None:
        return
    corners = [(0.0, 0.0), (shape.width, 0.0), (shape.width, shape.height), (0.0, shape.height)]
    points = [(x * resolution, y * resolution) for x, y in (tf.apply(cx, cy) for cx, cy in corners)]
    if shape.fill:
        draw.polygon(points, fill=shape.fill)
    else:
        draw.polygon(points, outline=(0, 0, 0))


def render_page_tree(page: Page, resolution: float) -> Image.Image:
    """
    Rasterize a frame tree with Pillow: white page, glyph text drawn with the
    default font at the projected pen positions, shapes as transformed polygons.
    Rotated glyphs are drawn upright at their rotated pen position.
    """

    img = Image.new("RGB", page_size_px(page, resolution), (255, 255, 255))
    draw = ImageDraw.Draw(img)
    for frame, tf in _iter_painted(page):
        if frame.kind == FrameKind.TEXT:
            _draw_text(draw, frame, tf, resolution)
        elif frame.kind == FrameKind.SHAPE:
            _draw_shape(draw, frame, tf, resolution)
    return img
