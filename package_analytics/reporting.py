"""
Reporting and export utilities.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

import pandas as pd

from .models import AnalysisReport, HistoryMode


logger = logging.getLogger(__name__)

BULK_COLUMNS = [
    "package_name",
    "version",
    "mode",
    "total",
    "last_week",
    "average_daily",
    "growth_rate",
    "vulnerabilities",
    "last_publish",
    "status",
    "error",
]


def safe_stem(package: str) -> str:
    """File-name friendly form of a package name (``@scope/pkg`` -> ``scope__pkg``)."""
    return package.lstrip("@").replace("/", "__")


def print_summary(report: AnalysisReport) -> None:
    info = report.package_info
    logger.info("=" * 60)
    logger.info("ANALYSIS RESULTS")
    logger.info("=" * 60)
    logger.info("Package: %s@%s", info.name, info.version)
    logger.info("Published: %s", info.last_publish.isoformat() if info.last_publish else "unknown")
    logger.info("History: %s (%d points)", report.mode.value, len(report.history))
    logger.info("-" * 60)
    logger.info("Total downloads: %s", f"{report.total:,}")
    logger.info("Last week: %s", f"{report.last_week:,}")
    logger.info("Average daily: %.2f", report.average_daily)
    logger.info("Growth rate: %+.1f%%", report.growth_rate)
    logger.info("Vulnerabilities: %d (%d advisories)", report.security.total, len(report.security.advisories))
    logger.info("=" * 60)


def history_frame(report: AnalysisReport) -> pd.DataFrame:
    """One row per day or per yearly window."""
    if report.mode == HistoryMode.DAILY:
        rows = [{"date": p.date, "downloads": p.downloads} for p in report.history]
        return pd.DataFrame(rows, columns=["date", "downloads"])
    rows = [
        {
            "year": w.year,
            "start_date": w.start_date,
            "end_date": w.end_date,
            "downloads": w.downloads,
        }
        for w in report.history
    ]
    return pd.DataFrame(rows, columns=["year", "start_date", "end_date", "downloads"])


def _flatten_cell(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value, default=str)
    return value


def advisories_frame(report: AnalysisReport) -> pd.DataFrame:
    df = pd.DataFrame(report.security.advisories)
    for col in df.columns:
        df[col] = df[col].map(_flatten_cell)
    return df


def save_results_json(report: AnalysisReport, output_dir: Path, package: str) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    results_file = output_dir / f"{safe_stem(package)}_results.json"
    with open(results_file, 'w') as f:
        json.dump(report.to_dict(), f, indent=2, default=str)
    return results_file


def export_history_csv(report: AnalysisReport, output_dir: Path, package: str) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    history_file = output_dir / f"{safe_stem(package)}_{report.mode.value}.csv"
    history_frame(report).to_csv(history_file, index=False)
    return history_file


def export_worksheets(report: AnalysisReport, output_dir: Path, package: str) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    excel_file = output_dir / f"{safe_stem(package)}_worksheets.xlsx"
    maintainers = pd.DataFrame(report.package_info.maintainers)
    with pd.ExcelWriter(excel_file, engine='openpyxl') as writer:
        history_frame(report).to_excel(writer, sheet_name=report.mode.value, index=False)
        advisories_frame(report).to_excel(writer, sheet_name="advisories", index=False)
        maintainers.to_excel(writer, sheet_name="maintainers", index=False)
    return excel_file


def summary_row(report: AnalysisReport) -> Dict[str, Any]:
    """Flatten a report into one row of the bulk summary."""
    last_publish = report.package_info.last_publish
    return {
        "package_name": report.package_info.name,
        "version": report.package_info.version,
        "mode": report.mode.value,
        "total": report.total,
        "last_week": report.last_week,
        "average_daily": report.average_daily,
        "growth_rate": report.growth_rate,
        "vulnerabilities": report.security.total,
        "last_publish": last_publish.isoformat() if last_publish else None,
        "status": "ok",
        "error": None,
    }


def export_bulk_summary_csv(
    rows: Iterable[Dict],
    output_dir: Path,
    input_csv: Path,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    summary_file = output_dir / f"{input_csv.stem}_bulk_results.csv"
    df = pd.DataFrame(list(rows), columns=BULK_COLUMNS)
    df.to_csv(summary_file, index=False)
    return summary_file


def bulk_history_frame(reports: List[AnalysisReport]) -> pd.DataFrame:
    """Concatenate the history series of several reports, tagged by package."""
    frames = []
    for report in reports:
        df = history_frame(report)
        df.insert(0, "package_name", report.package_info.name)
        frames.append(df)
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def export_bulk_history_csv(
    reports: List[AnalysisReport],
    output_dir: Path,
    input_csv: Path,
) -> Path | None:
    df = bulk_history_frame(reports)
    if df.empty:
        return None
    output_dir.mkdir(parents=True, exist_ok=True)
    history_file = output_dir / f"{input_csv.stem}_history.csv"
    df.to_csv(history_file, index=False)
    return history_file
