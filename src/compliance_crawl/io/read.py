from __future__ import annotations

import csv
import io
import logging

import pandas as pd

LOGGER = logging.getLogger(__name__)


def _trim_columns(df: pd.DataFrame) -> pd.DataFrame:
    trimmed = [str(column).strip() for column in df.columns]
    if len(set(trimmed)) == len(trimmed):
        return df.set_axis(trimmed, axis=1)
    # Later columns win when two raw keys trim to the same name.
    working = df.set_axis(trimmed, axis=1)
    return working.loc[:, ~working.columns.duplicated(keep="last")]


def read_rows(text: str, *, source: str = "<memory>") -> pd.DataFrame:
    """Parse one CSV resource into a string-valued frame with trimmed column keys.

    Records with more fields than the header are dropped with a warning; blank
    lines are skipped and an empty resource yields an empty frame.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    if not text.strip():
        return pd.DataFrame()

    dropped: list[list[str]] = []

    def _drop_bad_line(fields: list[str]) -> None:
        dropped.append(fields)
        return None

    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines=_drop_bad_line,
            engine="python",
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError, csv.Error) as exc:
        LOGGER.warning("Could not parse %s as CSV: %s", source, exc)
        return pd.DataFrame()

    if dropped:
        LOGGER.warning("Dropped %d malformed record(s) from %s", len(dropped), source)
    return _trim_columns(df.fillna(""))
