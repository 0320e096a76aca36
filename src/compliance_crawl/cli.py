from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from compliance_crawl.catalog import Classification, DatasetDescriptor
from compliance_crawl.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from compliance_crawl.io.side_config import SideConfig, load_side_config
from compliance_crawl.io.write import write_export
from compliance_crawl.logging import configure_logging
from compliance_crawl.paths import build_output_paths
from compliance_crawl.preprocess.reasons import REASON_TAGS, TREND_TAGS, is_synthetic
from compliance_crawl.report.render import render_frame
from compliance_crawl.session import ViewerSession
from compliance_crawl.state import FilterState
from compliance_crawl.viz.trends import ChartType, plot_trends

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> AppConfig:
    return load_config(config_path)


def _build_session(cfg: AppConfig) -> ViewerSession:
    return ViewerSession(cfg)


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _side_config(cfg: AppConfig) -> SideConfig:
    return load_side_config(cfg.side_config, timeout=cfg.data.http_timeout_seconds)


def _open_dataset(
    cfg: AppConfig,
    jurisdiction: str | None,
    period: str | None,
    classification: Classification,
    reasons: list[str] | None,
    search: str | None,
) -> ViewerSession:
    session = _build_session(cfg)
    descriptor = DatasetDescriptor(
        jurisdiction=jurisdiction or "",
        period=period or "",
        classification=classification,
    )
    state = FilterState.build(descriptor, reasons=reasons or (), search_text=search)
    if not asyncio.run(session.apply(state)):
        _fail(session.error or "dataset could not be loaded")
    return session


@app.command()
def periods(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
) -> None:
    """List each jurisdiction's supported periods in chronological order."""
    configure_logging()
    session = _build_session(_load_app_config(config))
    for jurisdiction in session.catalog.jurisdictions:
        labels = [
            f"{key} ({session.catalog.label(key)})"
            for key in session.catalog.supported_periods(jurisdiction)
        ]
        typer.echo(f"{jurisdiction}: {', '.join(labels) or '-'}")


@app.command()
def table(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    jurisdiction: str | None = typer.Option(None, help="Jurisdiction code, e.g. CA."),
    period: str | None = typer.Option(None, help="Period key; defaults to the latest supported."),
    classification: Classification = typer.Option(Classification.pnc),
    reason: list[str] | None = typer.Option(None, help="Reason code to match (repeatable)."),
    search: str | None = typer.Option(None, help="Case-insensitive URL substring."),
    page: int = typer.Option(1, help="1-based page number; clamped into range."),
    column: list[str] | None = typer.Option(None, help="Column to show (repeatable)."),
    describe: bool = typer.Option(False, help="List column descriptions below the table."),
    log_level: str = typer.Option("WARNING"),
) -> None:
    """Print one page of the filtered dataset."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    session = _open_dataset(cfg, jurisdiction, period, classification, reason, search)
    view = session.view(page_index=page, columns=column or None)
    side_config = _side_config(cfg)

    dataset = session.state.dataset
    window = view.window
    typer.echo(
        f"{dataset.jurisdiction} {dataset.period} {dataset.classification.value}: "
        f"page {window.page_index} of {window.page_count}, "
        f"rows {window.start_index + 1 if window.total_items else 0}-{window.end_index} "
        f"of {window.total_items}"
    )
    if view.rows.empty:
        typer.echo("No data rows.")
        return
    rendered = render_frame(view.rows)
    headers = side_config.headers(view.rows.columns)
    rendered.columns = [header.label for header in headers]
    typer.echo(rendered.to_string(index=False))
    if describe:
        for header in headers:
            if header.description:
                typer.echo(f"{header.label}: {header.description}")


@app.command()
def export(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    jurisdiction: str | None = typer.Option(None),
    period: str | None = typer.Option(None),
    classification: Classification = typer.Option(Classification.pnc),
    reason: list[str] | None = typer.Option(None),
    search: str | None = typer.Option(None),
    column: list[str] | None = typer.Option(None),
    log_level: str = typer.Option("WARNING"),
) -> None:
    """Write the filtered dataset as CSV, using the same projection as `table`."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    session = _open_dataset(cfg, jurisdiction, period, classification, reason, search)
    result = session.export(columns=column or None)
    paths = build_output_paths(out)
    output_path = write_export(result.content, paths.exports / result.filename)
    typer.echo(f"Exported {len(session.filtered())} rows to: {output_path}")


@app.command()
def trends(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    jurisdiction: list[str] | None = typer.Option(None, help="Jurisdiction (repeatable)."),
    reason: list[str] | None = typer.Option(None, help="Reason or aggregate tag (repeatable)."),
    all_reasons: bool = typer.Option(False, help="Chart every canonical reason code."),
    chart_type: ChartType = typer.Option(ChartType.line),
    chart: bool = typer.Option(True, help="Render a PNG chart next to the CSV."),
    log_level: str = typer.Option("WARNING"),
) -> None:
    """Count reasons per period for the selected jurisdictions."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    session = _build_session(cfg)

    selected_reasons = list(REASON_TAGS) if all_reasons else list(reason or [])
    if not selected_reasons:
        raise typer.BadParameter(
            "Select one or more reasons with --reason or --all-reasons. "
            f"Known tags: {', '.join(TREND_TAGS)}"
        )
    jurisdictions = list(jurisdiction or [])
    if not jurisdictions:
        fallback = session.catalog.fallback_jurisdiction()
        jurisdictions = [fallback] if fallback else []

    if not asyncio.run(session.select_trends(jurisdictions, selected_reasons)):
        _fail(session.trend_error or "trend data could not be loaded")

    trend_table = session.trends()
    paths = build_output_paths(out)
    stem = "trends_" + "_".join(session.trend_selection.jurisdictions or ("all",))
    csv_path = paths.trends / f"{stem}.csv"
    trend_table.to_frame().to_csv(csv_path)
    typer.echo(f"Trend series: {len(trend_table.series)}. Table: {csv_path}")
    side_config = _side_config(cfg)
    for tag in session.trend_selection.reasons:
        description = None if is_synthetic(tag) else side_config.describe(tag)
        if description:
            typer.echo(f"{tag}: {description}")
    if chart:
        chart_path = plot_trends(trend_table, paths.trends / f"{stem}.png", chart_type=chart_type)
        typer.echo(f"Chart: {chart_path}")
