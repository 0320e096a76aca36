from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from urllib.parse import quote

from compliance_crawl.config import AppConfig, DataConfig, is_url

LOGGER = logging.getLogger(__name__)


class Classification(str, Enum):
    all = "all"
    null = "null"
    pnc = "pnc"


@dataclass(frozen=True)
class DatasetDescriptor:
    jurisdiction: str
    period: str
    classification: Classification = Classification.pnc


@dataclass(frozen=True)
class PeriodCatalog:
    """Chronological period ordering plus per-jurisdiction coverage."""

    period_keys: tuple[str, ...]
    period_labels: dict[str, str]
    coverage: dict[str, tuple[str, ...]]
    default_jurisdiction: str | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> PeriodCatalog:
        keys = tuple(period.key for period in config.periods)
        labels = {period.key: period.label or period.key for period in config.periods}
        coverage = {
            code: tuple(periods) for code, periods in config.jurisdictions.items()
        }
        return cls(
            period_keys=keys,
            period_labels=labels,
            coverage=coverage,
            default_jurisdiction=config.default_jurisdiction,
        )

    @property
    def jurisdictions(self) -> tuple[str, ...]:
        return tuple(self.coverage)

    def label(self, period: str) -> str:
        return self.period_labels.get(period, period)

    def supported_periods(self, jurisdiction: str) -> tuple[str, ...]:
        supported = set(self.coverage.get(jurisdiction, ()))
        return tuple(key for key in self.period_keys if key in supported)

    def is_supported(self, jurisdiction: str, period: str) -> bool:
        return period in self.supported_periods(jurisdiction)

    def latest_period(self, jurisdiction: str) -> str | None:
        supported = self.supported_periods(jurisdiction)
        return supported[-1] if supported else None

    def fallback_jurisdiction(self) -> str | None:
        if self.default_jurisdiction and self.default_jurisdiction in self.coverage:
            return self.default_jurisdiction
        return self.jurisdictions[0] if self.coverage else None

    def period_axis(self, jurisdictions: tuple[str, ...] | list[str]) -> tuple[str, ...]:
        if not jurisdictions:
            return self.period_keys
        selected: set[str] = set()
        for jurisdiction in jurisdictions:
            selected.update(self.coverage.get(jurisdiction, ()))
        return tuple(key for key in self.period_keys if key in selected)


def correct_descriptor(descriptor: DatasetDescriptor, catalog: PeriodCatalog) -> DatasetDescriptor:
    """Return a descriptor whose (jurisdiction, period) pair is supported.

    Unknown jurisdictions fall back to the catalog default and unsupported
    periods to the jurisdiction's most recent supported period. When nothing
    is configured the descriptor is returned unchanged.
    """
    corrected = descriptor
    if corrected.jurisdiction not in catalog.coverage:
        fallback = catalog.fallback_jurisdiction()
        if fallback is None:
            return descriptor
        LOGGER.info(
            "Unknown jurisdiction %r; falling back to %r", corrected.jurisdiction, fallback
        )
        corrected = replace(corrected, jurisdiction=fallback)

    if not catalog.is_supported(corrected.jurisdiction, corrected.period):
        latest = catalog.latest_period(corrected.jurisdiction)
        if latest is None:
            return corrected
        LOGGER.info(
            "Period %r not supported for %s; falling back to %r",
            corrected.period,
            corrected.jurisdiction,
            latest,
        )
        corrected = replace(corrected, period=latest)
    return corrected


def resource_name(descriptor: DatasetDescriptor, data: DataConfig) -> str:
    token = data.classification_tokens.get(
        descriptor.classification.value, descriptor.classification.value
    )
    return data.resource_template.format(
        jurisdiction=descriptor.jurisdiction,
        period=descriptor.period,
        classification=descriptor.classification.value,
        token=token,
    )


def resolve_locator(descriptor: DatasetDescriptor, data: DataConfig) -> str:
    """Build the path or URL of the CSV resource for ``descriptor``."""
    name = resource_name(descriptor, data)
    root = data.root or "."
    if is_url(root):
        return f"{root.rstrip('/')}/{quote(name)}"
    return str(Path(root) / name)
