from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

import requests

from compliance_crawl.config import SideConfigPaths, is_url

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnHeader:
    name: str
    label: str
    description: str | None = None


@dataclass(frozen=True)
class SideConfig:
    labels: dict[str, str]
    descriptions: dict[str, str]

    def header(self, column: str) -> ColumnHeader:
        return ColumnHeader(
            name=column,
            label=self.labels.get(column) or column,
            description=self.descriptions.get(column),
        )

    def headers(self, columns: Iterable[str]) -> list[ColumnHeader]:
        return [self.header(column) for column in columns]

    def describe(self, key: str) -> str | None:
        return self.descriptions.get(key)


def _read_json_document(location: str, timeout: float) -> Any:
    if is_url(location):
        response = requests.get(location, timeout=timeout)
        response.raise_for_status()
        return response.json()
    with Path(location).open("r", encoding="utf-8-sig") as handle:
        return json.load(handle)


def _as_string_map(payload: Any) -> dict[str, str]:
    if not isinstance(payload, Mapping):
        raise ValueError("side configuration must be a JSON object")
    return {
        str(key): str(value)
        for key, value in payload.items()
        if value is not None and not isinstance(value, (dict, list))
    }


def load_side_document(location: str | None, *, timeout: float = 10.0) -> dict[str, str]:
    """Load a key -> text JSON document; any failure logs a warning and yields {}."""
    if not location:
        return {}
    try:
        return _as_string_map(_read_json_document(location, timeout))
    except (OSError, ValueError, requests.RequestException) as exc:
        LOGGER.warning("Failed to load side configuration %s: %s", location, exc)
        return {}


def load_side_config(paths: SideConfigPaths, *, timeout: float = 10.0) -> SideConfig:
    return SideConfig(
        labels=load_side_document(paths.labels_path, timeout=timeout),
        descriptions=load_side_document(paths.descriptions_path, timeout=timeout),
    )
