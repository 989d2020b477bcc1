"""Report chart blocks: matplotlib figures rendered to PNG bitmaps."""

from io import BytesIO
from typing import Any, Dict, List

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from PIL import Image  # noqa: E402

from courier_ops.core.models import DashboardSnapshot  # noqa: E402
from courier_ops.core.money import to_display_amount  # noqa: E402
from courier_ops.reports.compositor import ReportBlock  # noqa: E402

BRAND_COLORS = {
    "primary": "#f97316",
    "secondary": "#6366f1",
    "success": "#10b981",
    "danger": "#ef4444",
    "neutral": "#64748b",
    "amber": "#f59e0b",
}

CATEGORY_COLORS = [
    "#f97316", "#6366f1", "#10b981", "#ef4444", "#8b5cf6",
    "#ec4899", "#06b6d4", "#f59e0b", "#3b82f6",
]

FIGSIZE = (10, 4.5)
RASTER_DPI = 150


def _new_axes(title: str):
    fig, ax = plt.subplots(figsize=FIGSIZE)
    fig.patch.set_facecolor("#ffffff")
    ax.set_title(title, fontsize=13, fontweight="bold", color="#0f172a", pad=12)
    ax.tick_params(colors="#94a3b8", labelsize=9)
    ax.grid(axis="y", color="#f1f5f9", linestyle="--")
    for side in ("top", "right"):
        ax.spines[side].set_visible(False)
    return fig, ax


def _labels(series: List[Dict[str, Any]]) -> List[str]:
    return [str(point.get("name", "")) for point in series]


def _numeric_keys(series: List[Dict[str, Any]], exclude=("name",)) -> List[str]:
    keys: List[str] = []
    for point in series:
        for key, value in point.items():
            if key in exclude or key in keys:
                continue
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                keys.append(key)
    return keys


def revenue_figure(snapshot: DashboardSnapshot):
    series = snapshot.series("weeklyRevenue")
    values = [float(to_display_amount(p.get("revenue", 0))) for p in series]
    fig, ax = _new_axes("Revenue")
    x = range(len(series))
    ax.plot(x, values, color=BRAND_COLORS["primary"], linewidth=2)
    ax.fill_between(x, values, color=BRAND_COLORS["primary"], alpha=0.15)
    ax.set_xticks(list(x), _labels(series))
    ax.set_ylabel("USD", color="#64748b")
    return fig


def delivery_trend_figure(snapshot: DashboardSnapshot):
    series = snapshot.series("weeklyDeliveryTrend")
    fig, ax = _new_axes("Delivery Success vs Failure")
    x = range(len(series))
    ax.plot(x, [p.get("success", 0) for p in series], color=BRAND_COLORS["success"], marker="o", label="Success")
    ax.plot(x, [p.get("fail", 0) for p in series], color=BRAND_COLORS["danger"], marker="o", label="Failed")
    ax.set_xticks(list(x), _labels(series))
    ax.legend(loc="upper left", fontsize=8, frameon=False)
    return fig


def category_flow_figure(snapshot: DashboardSnapshot):
    series = snapshot.series("categoryFlows")
    fig, ax = _new_axes("Category Flows")
    x = range(len(series))
    for i, key in enumerate(_numeric_keys(series)):
        ax.plot(
            x,
            [p.get(key, 0) for p in series],
            color=CATEGORY_COLORS[i % len(CATEGORY_COLORS)],
            label=key.capitalize(),
        )
    ax.set_xticks(list(x), _labels(series))
    if series:
        ax.legend(loc="upper left", fontsize=7, frameon=False, ncol=3)
    return fig


def branch_product_mix_figure(snapshot: DashboardSnapshot):
    series = snapshot.series("branchProductMix")
    fig, ax = _new_axes("Branch Product Mix")
    keys = _numeric_keys(series)
    width = 0.8 / max(1, len(keys))
    for i, key in enumerate(keys):
        ax.bar(
            [n + i * width for n in range(len(series))],
            [p.get(key, 0) for p in series],
            width=width,
            color=CATEGORY_COLORS[i % len(CATEGORY_COLORS)],
            label=key.capitalize(),
        )
    ax.set_xticks([n + 0.4 - width / 2 for n in range(len(series))], _labels(series))
    if keys:
        ax.legend(loc="upper right", fontsize=7, frameon=False, ncol=3)
    return fig


REPORT_SECTIONS = (
    ("revenue", "Revenue", revenue_figure),
    ("delivery_trend", "Delivery Trend", delivery_trend_figure),
    ("category_flows", "Category Flows", category_flow_figure),
    ("branch_mix", "Branch Product Mix", branch_product_mix_figure),
)


def build_report_blocks(snapshot: DashboardSnapshot) -> List[ReportBlock]:
    """The dashboard report sections, in page order."""
    blocks: List[ReportBlock] = []
    try:
        for key, title, draw in REPORT_SECTIONS:
            blocks.append(ReportBlock(key, title, draw(snapshot)))
    except Exception:
        close_blocks(blocks)
        raise
    return blocks


def rasterize_block(block: ReportBlock) -> Image.Image:
    """
    Render a block's source to an RGB bitmap.

    matplotlib figures are drawn to PNG at RASTER_DPI and closed;
    PIL images pass straight through.
    """
    source = block.source
    if isinstance(source, Image.Image):
        return source.convert("RGB")

    buf = BytesIO()
    try:
        source.savefig(buf, format="png", dpi=RASTER_DPI, bbox_inches="tight", facecolor="#ffffff")
    finally:
        plt.close(source)
    buf.seek(0)
    image = Image.open(buf)
    image.load()
    return image.convert("RGB")


def close_blocks(blocks: List[ReportBlock]) -> None:
    """Release figures that were never rasterized (aborted reports)."""
    for block in blocks:
        if not isinstance(block.source, Image.Image):
            plt.close(block.source)
