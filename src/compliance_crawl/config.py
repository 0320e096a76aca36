from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_RESOURCE_TEMPLATE = "{jurisdiction}/Crawl_Data_{jurisdiction} - {token}{period}.csv"
DATA_ROOT_ENV_VAR = "COMPLIANCE_CRAWL_DATA_ROOT"

ClassificationName = Literal["all", "null", "pnc"]


class PeriodConfig(BaseModel):
    key: str
    label: str | None = None


class DataConfig(BaseModel):
    root: str | None = None
    resource_template: str = DEFAULT_RESOURCE_TEMPLATE
    classification_tokens: dict[ClassificationName, str] = Field(
        default_factory=lambda: {
            "all": "AllSites",
            "null": "NullSites",
            "pnc": "PotentiallyNonCompliantSites",
        }
    )
    http_timeout_seconds: float = Field(default=30.0, gt=0.0)


class ColumnsConfig(BaseModel):
    url: str = "Site URL"
    reasons: str = "Reasons_Non_Compliant"


class ViewConfig(BaseModel):
    page_size: int = Field(default=25, ge=1)
    visible_columns: list[str] | None = None


class SideConfigPaths(BaseModel):
    labels_path: str | None = None
    descriptions_path: str | None = None


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    periods: list[PeriodConfig] = Field(default_factory=list)
    jurisdictions: dict[str, list[str]] = Field(default_factory=dict)
    default_jurisdiction: str | None = None
    data: DataConfig = Field(default_factory=DataConfig)
    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    side_config: SideConfigPaths = Field(default_factory=SideConfigPaths)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    if is_url(path_value):
        return path_value
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    if config.data.root:
        config.data.root = _resolve_optional_path(config.data.root, base_dir)
    else:
        config.data.root = _resolve_optional_path(os.getenv(DATA_ROOT_ENV_VAR), Path.cwd())
    config.side_config.labels_path = _resolve_optional_path(
        config.side_config.labels_path,
        base_dir,
    )
    config.side_config.descriptions_path = _resolve_optional_path(
        config.side_config.descriptions_path,
        base_dir,
    )
    return config
