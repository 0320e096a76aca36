from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Mapping

import pandas as pd

from compliance_crawl.catalog import PeriodCatalog
from compliance_crawl.preprocess.reasons import NULL_SITES_TAG, PNC_SITES_TAG, parse_reasons
from compliance_crawl.state import TrendSelection


@dataclass(frozen=True)
class TrendCell:
    """Loaded rows behind one (jurisdiction, period) slot."""

    pnc_rows: pd.DataFrame
    null_rows: pd.DataFrame
    reason_counts: Counter = field(default_factory=Counter)

    @classmethod
    def build(
        cls,
        pnc_rows: pd.DataFrame,
        null_rows: pd.DataFrame,
        *,
        reasons_column: str,
    ) -> TrendCell:
        counts: Counter = Counter()
        if reasons_column in pnc_rows.columns:
            for raw in pnc_rows[reasons_column]:
                # A row counts once per tag even if the cell repeats it.
                counts.update(set(parse_reasons(raw)))
        return cls(pnc_rows=pnc_rows, null_rows=null_rows, reason_counts=counts)

    def count(self, tag: str) -> int:
        if tag == PNC_SITES_TAG:
            return int(len(self.pnc_rows))
        if tag == NULL_SITES_TAG:
            return int(len(self.null_rows))
        return int(self.reason_counts.get(tag, 0))


@dataclass(frozen=True)
class TrendSeries:
    jurisdiction: str
    tag: str
    points: tuple[tuple[str, int | None], ...]

    @property
    def label(self) -> str:
        return f"{self.jurisdiction} - {self.tag}"

    @property
    def counts(self) -> list[int | None]:
        return [count for _, count in self.points]


@dataclass(frozen=True)
class TrendTable:
    periods: tuple[str, ...]
    labels: tuple[str, ...]
    series: tuple[TrendSeries, ...]

    def to_frame(self) -> pd.DataFrame:
        """Periods as rows, one nullable integer column per series."""
        frame = pd.DataFrame(
            {
                series.label: pd.array(series.counts, dtype="Int64")
                for series in self.series
            },
            index=pd.Index(self.periods, name="period"),
        )
        frame.insert(0, "period_label", list(self.labels))
        return frame


def aggregate_trends(
    selection: TrendSelection,
    cells: Mapping[tuple[str, str], TrendCell],
    catalog: PeriodCatalog,
) -> TrendTable:
    """Count reason occurrences on a shared chronological period axis.

    A slot outside the jurisdiction's coverage (or not loaded) is ``None``,
    never ``0``; a covered slot without matching rows is ``0``.
    """
    axis = catalog.period_axis(selection.jurisdictions)
    labels = tuple(catalog.label(period) for period in axis)

    series: list[TrendSeries] = []
    for jurisdiction in selection.jurisdictions:
        supported = set(catalog.supported_periods(jurisdiction))
        for tag in selection.reasons:
            points: list[tuple[str, int | None]] = []
            for period in axis:
                cell = cells.get((jurisdiction, period)) if period in supported else None
                points.append((period, cell.count(tag) if cell is not None else None))
            series.append(TrendSeries(jurisdiction=jurisdiction, tag=tag, points=tuple(points)))
    return TrendTable(periods=axis, labels=labels, series=tuple(series))
