"""
REPORT COMPOSITOR

Purpose:
- Lay an ordered list of visual blocks out onto fixed-size pages
- Deterministic: same blocks + same bitmaps -> same layout

Layout rules:
- Every block is rasterized independently by the injected rasterizer
- The bitmap is scaled to the content width; height keeps aspect ratio
- A running cursor starts at the top margin (below the title band on
  page 1); if cursor + height > page_height - margin, a new page starts
- Blocks are never reordered and never split; a block taller than a
  page sits at the top of a fresh page and overflows the bottom margin
- The title is drawn directly on page 1, never rasterized
- Any rasterization failure aborts the whole composition

Rules:
- Stateless: nothing survives between compose() calls
- No IO (see pdf_export for the document itself)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# A4 portrait, in millimetres
PAGE_WIDTH = 210
PAGE_HEIGHT = 297
PAGE_MARGIN = 10
TITLE_HEIGHT = 20
BLOCK_GAP = 10


class ReportGenerationError(Exception):
    """Raised when a report cannot be produced; no partial output exists."""
    pass


@dataclass(frozen=True)
class ReportBlock:
    key: str
    title: str
    source: Any


@dataclass(frozen=True)
class PlacedBlock:
    block: ReportBlock
    bitmap: Any
    x: float
    y: float
    width: float
    height: float


@dataclass
class ReportPage:
    number: int
    blocks: List[PlacedBlock] = field(default_factory=list)
    title: Optional[str] = None


@dataclass(frozen=True)
class ReportLayout:
    title: Optional[str]
    pages: List[ReportPage]
    page_width: float
    page_height: float
    margin: float
    title_height: float

    @property
    def page_count(self) -> int:
        return len(self.pages)


def bitmap_size(bitmap: Any) -> Tuple[int, int]:
    """Pixel (width, height) of a rasterized block (PIL images and alike)."""
    size = getattr(bitmap, "size", None)
    if isinstance(size, tuple) and len(size) == 2:
        return int(size[0]), int(size[1])
    return int(bitmap.width), int(bitmap.height)


def compose(
    blocks: Sequence[ReportBlock],
    page_width: float = PAGE_WIDTH,
    page_height: float = PAGE_HEIGHT,
    margin: float = PAGE_MARGIN,
    *,
    rasterize: Callable[[ReportBlock], Any],
    title: Optional[str] = None,
    title_height: float = TITLE_HEIGHT,
    gap: float = BLOCK_GAP,
) -> ReportLayout:
    """
    Rasterize and paginate `blocks`.

    Args:
        blocks: Visual blocks, in output order
        page_width, page_height, margin: Page geometry (display units)
        rasterize: block -> bitmap; the external "render to bitmap" step
        title: Drawn at the top of page 1 when given
        title_height: Vertical band reserved for the title
        gap: Space left after every placed block

    Returns:
        ReportLayout with one or more pages

    Raises:
        ReportGenerationError: no blocks, bad geometry, or a block failed
            to rasterize
    """
    if not blocks:
        raise ReportGenerationError("No report blocks to compose")

    content_width = page_width - 2 * margin
    bottom = page_height - margin
    if content_width <= 0 or bottom <= margin:
        raise ReportGenerationError(
            f"Margin {margin} leaves no content area on a {page_width}x{page_height} page"
        )

    first_page = ReportPage(number=1, title=title)
    pages = [first_page]
    cursor = margin + (title_height if title else 0)

    for block in blocks:
        bitmap = _rasterize(block, rasterize)
        px_width, px_height = bitmap_size(bitmap)
        if px_width <= 0 or px_height <= 0:
            raise ReportGenerationError(f"Block '{block.key}' rendered to an empty bitmap")

        height = px_height * content_width / px_width

        # Only break when the current page already holds something
        if cursor + height > bottom and cursor > margin:
            pages.append(ReportPage(number=len(pages) + 1))
            cursor = margin

        pages[-1].blocks.append(PlacedBlock(
            block=block,
            bitmap=bitmap,
            x=margin,
            y=cursor,
            width=content_width,
            height=height,
        ))
        cursor += height + gap

    logger.info(f"Composed {len(blocks)} blocks onto {len(pages)} page(s)")

    return ReportLayout(
        title=title,
        pages=pages,
        page_width=page_width,
        page_height=page_height,
        margin=margin,
        title_height=title_height,
    )


def _rasterize(block: ReportBlock, rasterize: Callable[[ReportBlock], Any]) -> Any:
    try:
        return rasterize(block)
    except Exception as e:
        logger.error(f"Rasterization failed for block '{block.key}': {str(e)}")
        raise ReportGenerationError(f"Failed to render '{block.title}'") from e
