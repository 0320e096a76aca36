from __future__ import annotations

from pathlib import Path

import yaml
from typer.testing import CliRunner

from compliance_crawl.cli import app


def _write_fixture(tmp_path: Path) -> Path:
    data_root = tmp_path / "data"
    resources = {
        ("CA", "P1", "PotentiallyNonCompliantSites"): [
            "Site URL,Reasons_Non_Compliant,Vendors",
            "https://shop.example,\"['uspapi','OptanonConsent']\",\"{'ads': ['x.com']}\"",
            "https://news.example,\"['OptanonConsent']\",[]",
            "https://blog.example,\"['uspapi']\",",
        ],
        ("CA", "P1", "NullSites"): ["Site URL", "https://null.example"],
        ("CA", "P2", "PotentiallyNonCompliantSites"): [
            "Site URL,Reasons_Non_Compliant",
            "https://shop.example,\"['Invalid_GPPString']\"",
        ],
        ("CA", "P2", "NullSites"): ["Site URL"],
        ("CT", "P2", "PotentiallyNonCompliantSites"): [
            "Site URL,Reasons_Non_Compliant",
            "https://ct.example,\"['uspapi']\"",
        ],
        ("CT", "P2", "NullSites"): ["Site URL", "https://a.example", "https://b.example"],
    }
    for (jurisdiction, period, token), lines in resources.items():
        path = data_root / jurisdiction / f"Crawl_Data_{jurisdiction} - {token}{period}.csv"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    (tmp_path / "labels.json").write_text('{"Site URL": "Website"}', encoding="utf-8")
    (tmp_path / "descriptions.json").write_text(
        '{"Site URL": "Crawled origin", "uspapi": "USP API string", "Null Sites": "Unused"}',
        encoding="utf-8",
    )
    config = {
        "data": {"root": "data"},
        "periods": [{"key": "P1", "label": "Period one"}, {"key": "P2", "label": "Period two"}],
        "jurisdictions": {"CA": ["P1", "P2"], "CT": ["P2"]},
        "default_jurisdiction": "CA",
        "view": {"page_size": 2},
        "side_config": {"labels_path": "labels.json", "descriptions_path": "descriptions.json"},
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return config_path


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("table", "export", "trends", "periods"):
        assert command in result.stdout


def test_periods_command_lists_coverage(tmp_path: Path) -> None:
    config_path = _write_fixture(tmp_path)

    result = CliRunner().invoke(app, ["periods", "--config", str(config_path)])

    assert result.exit_code == 0, result.stdout
    assert "CA: P1 (Period one), P2 (Period two)" in result.stdout
    assert "CT: P2 (Period two)" in result.stdout


def test_table_command_filters_and_pages(tmp_path: Path) -> None:
    config_path = _write_fixture(tmp_path)

    result = CliRunner().invoke(
        app,
        [
            "table",
            "--config",
            str(config_path),
            "--jurisdiction",
            "CA",
            "--period",
            "P1",
            "--reason",
            "uspapi",
            "--page",
            "1",
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert "CA P1 pnc: page 1 of 1, rows 1-2 of 2" in result.stdout
    assert "Website" in result.stdout
    assert "https://shop.example" in result.stdout
    assert "https://blog.example" in result.stdout
    assert "https://news.example" not in result.stdout
    assert "Ads: x.com" in result.stdout
    assert "Crawled origin" not in result.stdout


def test_table_command_corrects_unsupported_period(tmp_path: Path) -> None:
    config_path = _write_fixture(tmp_path)

    result = CliRunner().invoke(
        app,
        ["table", "--config", str(config_path), "--jurisdiction", "CT", "--period", "P1"],
    )

    assert result.exit_code == 0, result.stdout
    assert "CT P2 pnc" in result.stdout
    assert "https://ct.example" in result.stdout


def test_table_command_reports_fetch_failure(tmp_path: Path) -> None:
    config_path = _write_fixture(tmp_path)

    result = CliRunner().invoke(
        app,
        [
            "table",
            "--config",
            str(config_path),
            "--jurisdiction",
            "CA",
            "--period",
            "P2",
            "--classification",
            "all",
        ],
    )

    assert result.exit_code == 1
    assert "Crawl_Data_CA - AllSitesP2.csv" in result.output


def test_export_command_writes_bom_csv(tmp_path: Path) -> None:
    config_path = _write_fixture(tmp_path)
    out_dir = tmp_path / "out"

    result = CliRunner().invoke(
        app,
        [
            "export",
            "--config",
            str(config_path),
            "--out",
            str(out_dir),
            "--jurisdiction",
            "CA",
            "--period",
            "P1",
            "--search",
            "NEWS",
            "--column",
            "Reasons_Non_Compliant",
            "--column",
            "Site URL",
        ],
    )

    assert result.exit_code == 0, result.stdout
    exported = out_dir / "exports" / "crawl_CA_P1_pnc.csv"
    content = exported.read_bytes()
    assert content.startswith(b"\xef\xbb\xbf")
    assert content.decode("utf-8-sig").splitlines() == [
        "Reasons_Non_Compliant,Site URL",
        "['OptanonConsent'],https://news.example",
    ]
    assert "Exported 1 rows" in result.stdout


def test_trends_command_writes_table_and_chart(tmp_path: Path) -> None:
    config_path = _write_fixture(tmp_path)
    out_dir = tmp_path / "out"

    result = CliRunner().invoke(
        app,
        [
            "trends",
            "--config",
            str(config_path),
            "--out",
            str(out_dir),
            "--jurisdiction",
            "CA",
            "--jurisdiction",
            "CT",
            "--reason",
            "uspapi",
            "--reason",
            "Null Sites",
        ],
    )

    assert result.exit_code == 0, result.stdout
    table_path = out_dir / "trends" / "trends_CA_CT.csv"
    assert (out_dir / "trends" / "trends_CA_CT.png").exists()
    lines = table_path.read_text(encoding="utf-8").splitlines()
    assert lines == [
        "period,period_label,CA - uspapi,CA - Null Sites,CT - uspapi,CT - Null Sites",
        "P1,Period one,2,1,,",
        "P2,Period two,0,0,1,2",
    ]
    assert "Trend series: 4" in result.stdout
    assert "uspapi: USP API string" in result.stdout
    assert "Null Sites: Unused" not in result.stdout


def test_trends_command_requires_reasons(tmp_path: Path) -> None:
    config_path = _write_fixture(tmp_path)

    result = CliRunner().invoke(
        app, ["trends", "--config", str(config_path), "--out", str(tmp_path / "out"), "--no-chart"]
    )

    assert result.exit_code != 0


def test_table_command_lists_column_descriptions(tmp_path: Path) -> None:
    config_path = _write_fixture(tmp_path)

    result = CliRunner().invoke(
        app,
        [
            "table",
            "--config",
            str(config_path),
            "--jurisdiction",
            "CA",
            "--period",
            "P1",
            "--column",
            "Site URL",
            "--describe",
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert "Website: Crawled origin" in result.stdout
