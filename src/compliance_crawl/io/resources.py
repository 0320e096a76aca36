from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pandas as pd
import requests

from compliance_crawl.catalog import DatasetDescriptor, resolve_locator
from compliance_crawl.config import DataConfig, is_url
from compliance_crawl.io.read import read_rows

LOGGER = logging.getLogger(__name__)


class ResourceFetchError(RuntimeError):
    def __init__(self, locator: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {locator}: {reason}")
        self.locator = locator
        self.reason = reason


class ResourceLoader:
    """Fetch CSV resources from a data directory or a base URL."""

    def __init__(self, data: DataConfig, session: requests.Session | None = None) -> None:
        self._data = data
        self._session = session or requests.Session()

    def locate(self, descriptor: DatasetDescriptor) -> str:
        return resolve_locator(descriptor, self._data)

    def _read_file(self, locator: str) -> str:
        try:
            return Path(locator).read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ResourceFetchError(locator, str(exc)) from exc

    def _get_url(self, locator: str) -> str:
        try:
            response = self._session.get(
                locator,
                timeout=self._data.http_timeout_seconds,
                headers={"Cache-Control": "no-store"},
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ResourceFetchError(locator, str(exc)) from exc
        response.encoding = response.encoding or "utf-8"
        return response.text

    async def fetch_text(self, locator: str) -> str:
        if is_url(locator):
            return await asyncio.to_thread(self._get_url, locator)
        return await asyncio.to_thread(self._read_file, locator)

    async def load_rows(self, descriptor: DatasetDescriptor) -> pd.DataFrame:
        locator = self.locate(descriptor)
        LOGGER.debug("Loading %s", locator)
        text = await self.fetch_text(locator)
        return read_rows(text, source=locator)
