from pathlib import Path

import json
import pandas as pd

from package_analytics.analyzer import PackageAnalyzer
from package_analytics.models import HistoryMode, VulnerabilityMetadata
from package_analytics.reporting import (
    advisories_frame,
    export_bulk_history_csv,
    export_bulk_summary_csv,
    export_history_csv,
    export_worksheets,
    history_frame,
    safe_stem,
    save_results_json,
    summary_row,
)


def test_safe_stem():
    assert safe_stem("left-pad") == "left-pad"
    assert safe_stem("@babel/core") == "babel__core"


def test_history_frame_shapes(client, clock):
    yearly = PackageAnalyzer(client=client, clock=clock).analyze("left-pad", "1.3.0")
    daily = PackageAnalyzer(client=client, mode=HistoryMode.DAILY, clock=clock).analyze(
        "left-pad", "1.3.0"
    )

    yearly_df = history_frame(yearly)
    daily_df = history_frame(daily)

    assert list(yearly_df.columns) == ["year", "start_date", "end_date", "downloads"]
    assert yearly_df["downloads"].sum() == 750
    assert list(daily_df.columns) == ["date", "downloads"]
    assert len(daily_df) == 7


def test_advisories_frame_flattens_nested_values(client, clock):
    client.audit = VulnerabilityMetadata(
        vulnerabilities={"high": 1},
        advisories=[{"id": 7, "findings": [{"version": "1.0.0"}]}],
    )
    report = PackageAnalyzer(client=client, clock=clock).analyze("left-pad", "1.3.0")

    df = advisories_frame(report)

    assert df.loc[0, "findings"] == json.dumps([{"version": "1.0.0"}])


def test_reporting_exports(tmp_path: Path, client, clock):
    output_dir = tmp_path / "out"
    report = PackageAnalyzer(client=client, clock=clock).analyze("left-pad", "1.3.0")

    results_file = save_results_json(report, output_dir, "left-pad")
    history_file = export_history_csv(report, output_dir, "left-pad")
    excel_file = export_worksheets(report, output_dir, "left-pad")

    assert results_file.exists()
    assert json.loads(results_file.read_text())["downloads"]["total"] == 750
    assert history_file.name == "left-pad_yearly.csv"
    assert len(pd.read_csv(history_file)) == 4
    assert excel_file.exists()
    assert set(pd.read_excel(excel_file, sheet_name=None)) == {"yearly", "advisories", "maintainers"}


def test_bulk_exports(tmp_path: Path, client, clock):
    report = PackageAnalyzer(client=client, clock=clock).analyze("left-pad", "1.3.0")
    input_csv = tmp_path / "packages.csv"
    rows = [
        summary_row(report),
        {"package_name": "ghost", "version": "1.0.0", "status": "error", "error": "not found"},
    ]

    summary_file = export_bulk_summary_csv(rows, tmp_path, input_csv)
    history_file = export_bulk_history_csv([report], tmp_path, input_csv)

    summary = pd.read_csv(summary_file)
    assert summary_file.name == "packages_bulk_results.csv"
    assert list(summary["status"]) == ["ok", "error"]
    assert summary.loc[0, "vulnerabilities"] == 3
    assert history_file is not None
    assert set(pd.read_csv(history_file)["package_name"]) == {"left-pad"}
    assert export_bulk_history_csv([], tmp_path, input_csv) is None
