"""
PDF REPORT EXPORT

Purpose:
- Turn a composed ReportLayout into a downloadable PDF
- Titled, date-named, one section per block in source order

Requirements:
- A4 portrait (210 x 297 mm), 10 mm margin
- All-or-nothing: any failure raises ReportGenerationError and no bytes
  are returned
"""

import logging
from datetime import date
from io import BytesIO
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from courier_ops.core.models import DashboardSnapshot
from courier_ops.reports.charts import build_report_blocks, close_blocks, rasterize_block
from courier_ops.reports.compositor import (
    PAGE_HEIGHT,
    PAGE_MARGIN,
    PAGE_WIDTH,
    ReportBlock,
    ReportGenerationError,
    ReportLayout,
    compose,
)

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4
DEFAULT_DPI = 150
TITLE_FONT_SIZE_MM = 6.5

PERIOD_TITLES = {
    "week": "Weekly Logistics Report",
    "month": "Monthly Logistics Report",
    "year": "Yearly Logistics Report",
}


def report_filename(on: Optional[date] = None) -> str:
    return f"Logistics_Report_{(on or date.today()).isoformat()}.pdf"


def report_title(period: str) -> str:
    return PERIOD_TITLES.get(period, PERIOD_TITLES["week"])


def _px(value_mm: float, dpi: int) -> int:
    return int(round(value_mm * dpi / MM_PER_INCH))


def _draw_title(canvas: Image.Image, layout: ReportLayout, dpi: int) -> None:
    draw = ImageDraw.Draw(canvas)
    font = ImageFont.load_default(size=_px(TITLE_FONT_SIZE_MM, dpi))
    left, top, right, bottom = draw.textbbox((0, 0), layout.title, font=font)
    x = _px(layout.page_width / 2, dpi) - (right - left) // 2
    y = _px(layout.margin + 5, dpi) - (bottom - top)
    draw.text((x, y), layout.title, fill="#0f172a", font=font)


def render_pdf(layout: ReportLayout, dpi: int = DEFAULT_DPI) -> bytes:
    """
    Paint every page at `dpi` and save them as one PDF.

    Blocks taller than the page are clipped at the page edge.
    """
    size = (_px(layout.page_width, dpi), _px(layout.page_height, dpi))
    canvases = []

    for page in layout.pages:
        canvas = Image.new("RGB", size, "white")

        if page.title:
            _draw_title(canvas, layout, dpi)

        for placed in page.blocks:
            target = (max(1, _px(placed.width, dpi)), max(1, _px(placed.height, dpi)))
            bitmap = placed.bitmap.convert("RGB").resize(target, Image.LANCZOS)
            canvas.paste(bitmap, (_px(placed.x, dpi), _px(placed.y, dpi)))

        canvases.append(canvas)

    buf = BytesIO()
    try:
        canvases[0].save(
            buf,
            format="PDF",
            save_all=True,
            append_images=canvases[1:],
            resolution=float(dpi),
        )
    except (OSError, ValueError) as e:
        raise ReportGenerationError(f"Unable to write PDF: {str(e)}") from e

    return buf.getvalue()


def build_dashboard_report(
    snapshot: DashboardSnapshot,
    on: Optional[date] = None,
    dpi: int = DEFAULT_DPI,
) -> Tuple[str, bytes]:
    """
    Compose the dashboard charts into a PDF.

    Returns:
        (file_name, pdf_bytes)

    Raises:
        ReportGenerationError: nothing is produced if any chart fails
    """
    if snapshot is None:
        raise ReportGenerationError("Dashboard data is not loaded yet")

    blocks: List[ReportBlock] = []
    try:
        blocks = build_report_blocks(snapshot)
        layout = compose(
            blocks,
            PAGE_WIDTH,
            PAGE_HEIGHT,
            PAGE_MARGIN,
            rasterize=rasterize_block,
            title=report_title(snapshot.period),
        )
    except ReportGenerationError:
        raise
    except Exception as e:
        logger.error(f"Report charts could not be drawn: {str(e)}")
        raise ReportGenerationError(f"Unable to draw report charts: {str(e)}") from e
    finally:
        close_blocks(blocks)

    pdf_bytes = render_pdf(layout, dpi=dpi)
    logger.info(f"Report generated: {layout.page_count} page(s), {len(pdf_bytes)} bytes")
    return report_filename(on), pdf_bytes
