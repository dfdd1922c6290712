from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from PIL import Image, ImageDraw

from contracts.errors import ConfigurationError
from contracts.layout import Document, Page
from contracts.words import WordRecord

from .config import ExtractionConfig
from .projector import check_resolution, project_words
from .walker import walk_page

logger = logging.getLogger(__name__)

MAX_PAGE_EXTENT_PT = 100.0 / 2.54 * 72.0  # 100 cm
PAGE_GAP_PT = 1.0
GAP_COLOR = (0, 0, 0)
BLANK_COLOR = (255, 255, 255)
BOX_COLOR = (255, 0, 0, 180)
BOX_STROKE_PX = 1


def _page_records(page: Page, page_index: int, config: ExtractionConfig) -> list[WordRecord]:
    words = walk_page(
        page,
        page_index=page_index,
        include_delimiters=config.include_delimiters,
        include_whitespace=config.include_whitespace,
        rules=config.rules,
    )
    return project_words(words, config.resolution)


def extract_words(document: Document, config: ExtractionConfig) -> list[WordRecord]:
    """
    Walk and project every page; records come back in page order, then paint order.

    With `workers > 1` pages run on a thread pool and are merged by page index.
    The first failing page cancels the pages still pending and its error propagates.
    """

    config.validate()
    check_resolution(config.resolution)

    pages = document.pages
    if config.workers <= 1 or len(pages) <= 1:
        per_page = [_page_records(p, i, config) for i, p in enumerate(pages)]
    else:
        by_page: dict[int, list[WordRecord]] = {}
        executor = ThreadPoolExecutor(max_workers=min(config.workers, len(pages)))
        try:
            futures = {executor.submit(_page_records, p, i, config): i for i, p in enumerate(pages)}
            for fut in as_completed(futures):
                by_page[futures[fut]] = fut.result()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
        per_page = [by_page[i] for i in range(len(pages))]

    records = [r for page_records in per_page for r in page_records]
    logger.info("extracted %d record(s) from %d page(s)", len(records), len(pages))
    return records


def check_renderable(document: Document) -> None:
    for page_index, page in enumerate(document.pages):
        if page.width > MAX_PAGE_EXTENT_PT or page.height > MAX_PAGE_EXTENT_PT:
            raise ConfigurationError(
                "Page is too large to rasterize",
                detail={
                    "page_index": page_index,
                    "width_pt": page.width,
                    "height_pt": page.height,
                    "limit_pt": MAX_PAGE_EXTENT_PT,
                },
            )


def merge_pages(images: list[Image.Image], *, gap_px: int) -> tuple[Image.Image, list[int]]:
    """
    Stack page rasters vertically, separated by `gap_px` rows of GAP_COLOR.

    Returns the merged image and each page's top offset in it. No pages gives
    a blank 1x1 image.
    """

    if not images:
        return Image.new("RGB", (1, 1), BLANK_COLOR), []

    width = max(im.width for im in images)
    height = sum(im.height for im in images) + gap_px * (len(images) - 1)
    canvas = Image.new("RGB", (width, height), GAP_COLOR)

    offsets: list[int] = []
    y = 0
    for im in images:
        canvas.paste(im.convert("RGB"), (0, y))
        offsets.append(y)
        y += im.height + gap_px
    return canvas, offsets


def draw_word_boxes(image: Image.Image, records: list[WordRecord], offsets: list[int]) -> Image.Image:
    """
    Outline every record's box on a copy of `image`, in emission order.
    """

    base = image.convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for r in records:
        b = r.bbox.offset(0.0, float(offsets[r.page]))
        draw.rectangle([b.x, b.y, b.x1, b.y1], outline=BOX_COLOR, width=BOX_STROKE_PX)
    return Image.alpha_composite(base, overlay).convert("RGB")


def render_rasters(
    page_images: list[Image.Image], records: list[WordRecord], *, resolution: float
) -> tuple[Image.Image, Image.Image]:
    """Plain merged raster and the same raster with word boxes drawn on top."""
    plain, offsets = merge_pages(page_images, gap_px=int(round(PAGE_GAP_PT * resolution)))
    return plain, draw_word_boxes(plain, records, offsets)
