"""
Report compositor: deterministic pagination of rasterized blocks.
"""

import pytest
from PIL import Image

from courier_ops.reports.compositor import ReportBlock, ReportGenerationError, compose


def blocks_of(*heights, width=200):
    return [
        ReportBlock(key=f"b{i}", title=f"Block {i}", source=Image.new("RGB", (width, h), "white"))
        for i, h in enumerate(heights)
    ]


def passthrough(block):
    return block.source


def page_keys(layout):
    return [[placed.block.key for placed in page.blocks] for page in layout.pages]


def test_blocks_break_onto_new_pages_in_order():
    """Usable height 200: 100 | 150 | 80 (150 + 80 does not fit)"""
    layout = compose(
        blocks_of(100, 150, 80), page_width=220, page_height=220, margin=10,
        rasterize=passthrough, gap=0,
    )

    assert page_keys(layout) == [["b0"], ["b1"], ["b2"]]
    assert layout.page_count == 3


def test_block_shares_page_when_it_fits():
    layout = compose(
        blocks_of(100, 150, 40), page_width=220, page_height=220, margin=10,
        rasterize=passthrough, gap=0,
    )

    assert page_keys(layout) == [["b0"], ["b1", "b2"]]
    second = layout.pages[1].blocks
    assert second[0].y == 10
    assert second[1].y == 160


def test_block_scaled_to_content_width():
    layout = compose(blocks_of(50, width=100), page_width=220, page_height=300, margin=10,
                     rasterize=passthrough, gap=0)

    placed = layout.pages[0].blocks[0]
    assert placed.x == 10
    assert placed.width == 200
    assert placed.height == 100


def test_title_reserves_band_on_first_page_only():
    layout = compose(
        blocks_of(100, 150), page_width=220, page_height=220, margin=10,
        rasterize=passthrough, title="Weekly Logistics Report", title_height=20, gap=0,
    )

    assert layout.pages[0].title == "Weekly Logistics Report"
    assert layout.pages[0].blocks[0].y == 30
    assert layout.pages[1].title is None
    assert layout.pages[1].blocks[0].y == 10


def test_gap_is_left_after_each_block():
    layout = compose(blocks_of(50, 50), page_width=220, page_height=300, margin=10,
                     rasterize=passthrough, gap=10)
    assert [b.y for b in layout.pages[0].blocks] == [10, 70]


def test_oversized_block_is_never_split_or_dropped():
    layout = compose(blocks_of(40, 500), page_width=220, page_height=220, margin=10,
                     rasterize=passthrough, gap=0)

    assert page_keys(layout) == [["b0"], ["b1"]]
    assert layout.pages[1].blocks[0].height == 500


def test_same_input_same_layout():
    blocks = blocks_of(100, 150, 80)
    first = compose(blocks, 220, 220, 10, rasterize=passthrough, gap=0)
    second = compose(blocks, 220, 220, 10, rasterize=passthrough, gap=0)

    assert page_keys(first) == page_keys(second)
    assert [[b.y for b in p.blocks] for p in first.pages] == [[b.y for b in p.blocks] for p in second.pages]


def test_empty_block_list_fails():
    with pytest.raises(ReportGenerationError):
        compose([], rasterize=passthrough)


def test_bad_geometry_fails():
    with pytest.raises(ReportGenerationError):
        compose(blocks_of(10), page_width=20, page_height=20, margin=10, rasterize=passthrough)


def test_rasterize_failure_aborts_whole_report():
    def explode(block):
        if block.key == "b1":
            raise RuntimeError("canvas lost")
        return block.source

    with pytest.raises(ReportGenerationError) as excinfo:
        compose(blocks_of(10, 10, 10), rasterize=explode)

    assert isinstance(excinfo.value.__cause__, RuntimeError)
