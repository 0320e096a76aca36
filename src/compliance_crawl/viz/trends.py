from __future__ import annotations

from enum import Enum
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from compliance_crawl.features.trends import TrendTable
from compliance_crawl.viz.common import save_figure


class ChartType(str, Enum):
    line = "line"
    bar = "bar"


COLOR_PALETTE = (
    "#2e7d32",
    "#1b5e20",
    "#43a047",
    "#66bb6a",
    "#81c784",
    "#26a69a",
    "#00796b",
    "#558b2f",
    "#689f38",
    "#8bc34a",
    "#33691e",
    "#00acc1",
    "#26c6da",
    "#9ccc65",
    "#4db6ac",
    "#a5d6a7",
)


def series_color(reason_index: int, jurisdiction_index: int) -> str:
    return COLOR_PALETTE[(reason_index * 3 + jurisdiction_index) % len(COLOR_PALETTE)]


def _values(counts: list[int | None]) -> np.ndarray:
    return np.array([np.nan if count is None else float(count) for count in counts], dtype=float)


def plot_trends(
    table: TrendTable,
    output_path: Path,
    chart_type: ChartType = ChartType.line,
    title: str = "Reason trends over periods",
) -> Path:
    """Render one line (or bar group) per series; absent slots are left as gaps."""
    jurisdictions = list(dict.fromkeys(series.jurisdiction for series in table.series))
    tags = list(dict.fromkeys(series.tag for series in table.series))
    positions = np.arange(len(table.periods))
    bar_width = 0.8 / max(1, len(table.series))

    fig, ax = plt.subplots(figsize=(12, 5))
    for index, series in enumerate(table.series):
        color = series_color(tags.index(series.tag), jurisdictions.index(series.jurisdiction))
        values = _values(series.counts)
        if chart_type == ChartType.bar:
            offset = (index - (len(table.series) - 1) / 2) * bar_width
            ax.bar(positions + offset, values, width=bar_width, color=color, label=series.label)
        else:
            ax.plot(positions, values, marker="o", linewidth=1.5, color=color, label=series.label)

    ax.set_xticks(positions)
    ax.set_xticklabels(table.labels, rotation=30, ha="right")
    ax.set_xlabel("Period")
    ax.set_ylabel("Number of Sites")
    ax.set_ylim(bottom=0)
    ax.set_title(title)
    if table.series:
        ax.legend(loc="upper center", bbox_to_anchor=(0.5, -0.25), ncol=3, fontsize="small")

    return save_figure(fig, output_path)
