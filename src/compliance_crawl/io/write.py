from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

import pandas as pd

from compliance_crawl.catalog import DatasetDescriptor
from compliance_crawl.features.pagination import project

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def export_filename(descriptor: DatasetDescriptor) -> str:
    parts = (
        descriptor.jurisdiction,
        descriptor.period,
        descriptor.classification.value,
    )
    safe = [_UNSAFE_FILENAME_CHARS.sub("-", part).strip("-") or "unknown" for part in parts]
    return "crawl_{}_{}_{}.csv".format(*safe)


def export_csv(df: pd.DataFrame, columns: Sequence[str]) -> bytes:
    """CSV bytes (UTF-8 with BOM) of the projected rows, fields in ``columns`` order."""
    table = project(df, columns)
    text = table.to_csv(index=False, lineterminator="\r\n")
    return ("\ufeff" + text).encode("utf-8")


def write_export(content: bytes, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path
