from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

import pandas as pd

from compliance_crawl.catalog import (
    Classification,
    DatasetDescriptor,
    PeriodCatalog,
    correct_descriptor,
)
from compliance_crawl.config import AppConfig
from compliance_crawl.features.filters import filter_rows
from compliance_crawl.features.pagination import Page, paginate, project
from compliance_crawl.features.trends import TrendCell, TrendTable, aggregate_trends
from compliance_crawl.io.resources import ResourceFetchError, ResourceLoader
from compliance_crawl.io.write import export_csv, export_filename
from compliance_crawl.state import FilterState, TrendSelection

LOGGER = logging.getLogger(__name__)


class RowLoader(Protocol):
    async def load_rows(self, descriptor: DatasetDescriptor) -> pd.DataFrame: ...


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes


class ViewerSession:
    """Selection state for one viewer, driven from a single event loop.

    Each selection change bumps a generation counter. A load only commits if
    its generation is still the latest when it completes, so results from a
    superseded selection are dropped instead of merged.
    """

    def __init__(self, config: AppConfig, loader: RowLoader | None = None) -> None:
        self.config = config
        self.catalog = PeriodCatalog.from_config(config)
        self._loader = loader or ResourceLoader(config.data)

        self._generation = 0
        self._state: FilterState | None = None
        self._rows: pd.DataFrame = pd.DataFrame()
        self.error: str | None = None

        self._trend_generation = 0
        self._trend_selection = TrendSelection()
        self._trend_loaded_for: tuple[str, ...] | None = None
        self._trend_cells: dict[tuple[str, str], TrendCell] = {}
        self.trend_error: str | None = None

    @property
    def state(self) -> FilterState | None:
        return self._state

    @property
    def rows(self) -> pd.DataFrame:
        return self._rows

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def trend_selection(self) -> TrendSelection:
        return self._trend_selection

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def apply(self, state: FilterState) -> bool:
        """Replace the filter state, loading its dataset when it changed.

        Returns True when this call committed; False when it failed or was
        superseded by a later call before its load finished.
        """
        state = state.with_dataset(correct_descriptor(state.dataset, self.catalog))
        self._generation += 1
        generation = self._generation

        if self._state is not None and self._state.dataset == state.dataset and self.error is None:
            self._state = state
            return True

        try:
            rows = await self._loader.load_rows(state.dataset)
        except ResourceFetchError as exc:
            if not self._is_current(generation):
                LOGGER.debug("Discarding stale load failure (generation %d)", generation)
                return False
            LOGGER.warning("%s", exc)
            self._state = state
            self._rows = pd.DataFrame()
            self.error = str(exc)
            return False

        if not self._is_current(generation):
            LOGGER.debug(
                "Discarding stale rows for %s (generation %d, latest %d)",
                state.dataset,
                generation,
                self._generation,
            )
            return False
        self._state = state
        self._rows = rows
        self.error = None
        return True

    def filtered(self) -> pd.DataFrame:
        if self._state is None:
            return self._rows
        return filter_rows(
            self._rows,
            self._state,
            reasons_column=self.config.columns.reasons,
            url_column=self.config.columns.url,
        )

    def columns(self) -> list[str]:
        visible = self.config.view.visible_columns
        if visible:
            return list(visible)
        return [str(column) for column in self._rows.columns]

    def view(self, page_index: int = 1, columns: Sequence[str] | None = None) -> Page:
        page = paginate(self.filtered(), page_index, self.config.view.page_size)
        return Page(window=page.window, rows=project(page.rows, columns or self.columns()))

    def export(self, columns: Sequence[str] | None = None) -> ExportResult:
        if self._state is None:
            raise RuntimeError("No dataset has been selected")
        return ExportResult(
            filename=export_filename(self._state.dataset),
            content=export_csv(self.filtered(), columns or self.columns()),
        )

    async def _load_trend_cell(self, jurisdiction: str, period: str) -> TrendCell:
        pnc_rows, null_rows = await asyncio.gather(
            self._loader.load_rows(DatasetDescriptor(jurisdiction, period, Classification.pnc)),
            self._loader.load_rows(DatasetDescriptor(jurisdiction, period, Classification.null)),
        )
        return TrendCell.build(pnc_rows, null_rows, reasons_column=self.config.columns.reasons)

    async def select_trends(self, jurisdictions: Iterable[str], reasons: Iterable[str]) -> bool:
        """Replace the trend selection, loading every covered slot concurrently."""
        selection = TrendSelection.build(jurisdictions, reasons)
        self._trend_generation += 1
        generation = self._trend_generation

        if self._trend_loaded_for == selection.jurisdictions and self.trend_error is None:
            self._trend_selection = selection
            return True

        slots = [
            (jurisdiction, period)
            for jurisdiction in selection.jurisdictions
            for period in self.catalog.supported_periods(jurisdiction)
        ]
        try:
            loaded = await asyncio.gather(
                *(self._load_trend_cell(jurisdiction, period) for jurisdiction, period in slots)
            )
        except ResourceFetchError as exc:
            if generation != self._trend_generation:
                LOGGER.debug("Discarding stale trend failure (generation %d)", generation)
                return False
            LOGGER.warning("Trend data load failed: %s", exc)
            self._trend_selection = selection
            self._trend_loaded_for = None
            self._trend_cells = {}
            self.trend_error = str(exc)
            return False

        if generation != self._trend_generation:
            LOGGER.debug("Discarding stale trend data (generation %d)", generation)
            return False
        self._trend_cells = dict(zip(slots, loaded))
        self._trend_loaded_for = selection.jurisdictions
        self._trend_selection = selection
        self.trend_error = None
        return True

    def trends(self) -> TrendTable:
        return aggregate_trends(self._trend_selection, self._trend_cells, self.catalog)
