from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable

from compliance_crawl.catalog import DatasetDescriptor


@dataclass(frozen=True)
class FilterState:
    dataset: DatasetDescriptor
    selected_reasons: frozenset[str] = field(default_factory=frozenset)
    search_text: str = ""

    @classmethod
    def build(
        cls,
        dataset: DatasetDescriptor,
        reasons: Iterable[str] = (),
        search_text: str | None = None,
    ) -> FilterState:
        return cls(
            dataset=dataset,
            selected_reasons=frozenset(reason for reason in reasons if reason),
            search_text=search_text or "",
        )

    def with_dataset(self, dataset: DatasetDescriptor) -> FilterState:
        return replace(self, dataset=dataset)


@dataclass(frozen=True)
class TrendSelection:
    jurisdictions: tuple[str, ...] = ()
    reasons: tuple[str, ...] = ()

    @classmethod
    def build(cls, jurisdictions: Iterable[str], reasons: Iterable[str]) -> TrendSelection:
        # Order of first selection is kept; repeats are ignored.
        return cls(
            jurisdictions=tuple(dict.fromkeys(code for code in jurisdictions if code)),
            reasons=tuple(dict.fromkeys(reason for reason in reasons if reason)),
        )
