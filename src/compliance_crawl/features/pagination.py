from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import pandas as pd


@dataclass(frozen=True)
class PageWindow:
    page_index: int
    page_size: int
    total_items: int

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self.total_items / self.page_size))

    @property
    def start_index(self) -> int:
        return (self.page_index - 1) * self.page_size

    @property
    def end_index(self) -> int:
        return min(self.start_index + self.page_size, self.total_items)


@dataclass(frozen=True)
class Page:
    window: PageWindow
    rows: pd.DataFrame


def clamp_window(page_index: int, page_size: int, total_items: int) -> PageWindow:
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    total = max(0, int(total_items))
    page_count = max(1, math.ceil(total / page_size))
    clamped = min(max(1, int(page_index)), page_count)
    return PageWindow(page_index=clamped, page_size=page_size, total_items=total)


def paginate(df: pd.DataFrame, page_index: int, page_size: int) -> Page:
    window = clamp_window(page_index, page_size, len(df))
    return Page(window=window, rows=df.iloc[window.start_index : window.end_index])


def project(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Select ``columns`` in the given order; missing columns and values become ""."""
    ordered = list(dict.fromkeys(columns))
    return df.reindex(columns=ordered).fillna("").astype(str)
