from __future__ import annotations

import re
from typing import Any

import pandas as pd

from compliance_crawl.preprocess.values import ListValue, MappingValue, parse_value

EMPTY_PLACEHOLDER = "None"
_UNDERSCORES = re.compile(r"_")
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_WHITESPACE = re.compile(r"\s+")


def humanize_key(key: Any) -> str:
    text = _UNDERSCORES.sub(" ", str(key or ""))
    text = _CAMEL_BOUNDARY.sub(r"\1 \2", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return re.sub(r"\b\w", lambda match: match.group(0).upper(), text)


def _join_items(items: tuple[str, ...]) -> str:
    return ", ".join(items) if items else EMPTY_PLACEHOLDER


def render_cell(raw: Any) -> str:
    """Display text for one cell; lists are comma-joined, mappings one line per key."""
    text = "" if raw is None else str(raw)
    if not text.strip():
        return text
    value = parse_value(text)
    if isinstance(value, ListValue):
        return _join_items(value.items)
    if isinstance(value, MappingValue):
        if not value.entries:
            return EMPTY_PLACEHOLDER
        return "\n".join(
            f"{humanize_key(key)}: {_join_items(items)}" for key, items in value.entries
        )
    return text


def render_frame(df: pd.DataFrame) -> pd.DataFrame:
    return df.apply(lambda column: column.map(render_cell)) if not df.empty else df.copy()
