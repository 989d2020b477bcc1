# courier_ops/core/pagination.py

"""
PAGINATION + LIST VIEW STATE

paginate() slices a filtered result into a 1-indexed, fixed-size window.
ListViewState owns the (phase, criteria, page) triple of one list view and
resets the page whenever the result set it points into may have shrunk.
"""

import math
from dataclasses import dataclass, replace
from typing import List, NamedTuple, Optional, Sequence, TypeVar

from courier_ops.core.filter_engine import FilterCriteria

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


class Page(NamedTuple):
    records: List
    total_pages: int
    page: int


def total_pages_for(count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(1, page), total_pages)


def paginate(records: Sequence[T], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    """
    Return (page_records, total_pages, clamped_page).

    The requested page is clamped into [1, total_pages] before slicing,
    so a stale page number never produces an empty page past the end.
    """
    total = total_pages_for(len(records), page_size)
    current = clamp_page(page, total)
    start = (current - 1) * page_size
    return Page(list(records[start:start + page_size]), total, current)


@dataclass(frozen=True)
class ListViewState:
    """
    Per-view filter/page state.

    Every with_* method returns a new state; changing the phase or any
    filter field sends the view back to page 1.
    """

    phase: Optional[str] = None
    criteria: FilterCriteria = FilterCriteria()
    page: int = 1

    def with_phase(self, phase: Optional[str]) -> "ListViewState":
        if phase == self.phase:
            return self
        return replace(self, phase=phase, page=1)

    def with_criteria(self, criteria: FilterCriteria) -> "ListViewState":
        if criteria == self.criteria:
            return self
        return replace(self, criteria=criteria, page=1)

    def with_filter(self, field_name: str, value: str) -> "ListViewState":
        return self.with_criteria(replace(self.criteria, **{field_name: value or ""}))

    def reset_filters(self) -> "ListViewState":
        return self.with_criteria(FilterCriteria())

    def with_page(self, page: int) -> "ListViewState":
        return replace(self, page=page)
