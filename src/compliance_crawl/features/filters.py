from __future__ import annotations

import pandas as pd

from compliance_crawl.catalog import Classification
from compliance_crawl.preprocess.reasons import parse_reasons
from compliance_crawl.state import FilterState


def _column_or_blank(df: pd.DataFrame, column: str) -> pd.Series:
    if column in df.columns:
        return df[column].fillna("").astype(str)
    return pd.Series("", index=df.index, dtype=object)


def reason_mask(df: pd.DataFrame, reasons: frozenset[str], reasons_column: str) -> pd.Series:
    cells = _column_or_blank(df, reasons_column)
    return cells.map(lambda raw: not reasons.isdisjoint(parse_reasons(raw))).astype(bool)


def search_mask(df: pd.DataFrame, query: str, url_column: str) -> pd.Series:
    needle = query.casefold()
    cells = _column_or_blank(df, url_column)
    return cells.map(lambda value: needle in value.casefold()).astype(bool)


def filter_rows(
    df: pd.DataFrame,
    state: FilterState,
    *,
    reasons_column: str,
    url_column: str,
) -> pd.DataFrame:
    """Rows matching the reason facet and the URL search, keeping input order.

    The reason facet only applies to potentially non-compliant datasets; the
    search applies to every classification. Either stage is skipped when its
    selection is empty.
    """
    mask = pd.Series(True, index=df.index, dtype=bool)
    if state.dataset.classification == Classification.pnc and state.selected_reasons:
        mask &= reason_mask(df, state.selected_reasons, reasons_column)
    query = state.search_text.strip()
    if query:
        mask &= search_mask(df, query, url_column)
    return df.loc[mask]
