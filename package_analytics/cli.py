"""
Command-line interface for the package analytics tool.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
from tqdm import tqdm

from .analyzer import PackageAnalyzer
from .config import AnalyticsConfig
from .errors import AnalyticsError
from .models import AnalysisReport, HistoryMode
from .reporting import (
    BULK_COLUMNS,
    export_bulk_history_csv,
    export_bulk_summary_csv,
    export_history_csv,
    export_worksheets,
    print_summary,
    save_results_json,
    summary_row,
)


logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = ("package_name", "version")


def _setup_logging(level: str = "INFO") -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _load_input_csv(path: Path) -> List[Dict[str, str]]:
    """Read bulk input rows; every column is kept as a string."""
    df = pd.read_csv(path, dtype=str).fillna("")
    missing = [col for col in REQUIRED_CSV_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Input CSV is missing columns: {', '.join(missing)}")
    return df.to_dict(orient="records")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarise downloads, growth and vulnerabilities for an npm package version"
    )

    parser.add_argument(
        "--package",
        help="The name of the package to analyze"
    )

    parser.add_argument(
        "--version",
        dest="package_version",
        help="The package version to audit and report the publish date for"
    )

    parser.add_argument(
        "--input-csv",
        type=Path,
        default=None,
        help="Analyze every row of a CSV with package_name,version columns"
    )

    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in HistoryMode],
        default=None,
        help="History series to report: trailing daily or yearly windows. Default: yearly"
    )

    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Length of the daily series in daily mode. Default: 7"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds. Default: 10"
    )

    parser.add_argument(
        "--get-csv",
        action="store_true",
        help="Export the download history to CSV"
    )

    parser.add_argument(
        "--get-worksheets",
        action="store_true",
        help="Export history, advisories and maintainers to an Excel file"
    )

    parser.add_argument(
        "--output-dir",
        default="./output",
        help="Output directory for results. Default: ./output"
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level. Default: INFO"
    )
    return parser


def build_config(args: argparse.Namespace) -> AnalyticsConfig:
    """Environment overrides first, then command-line flags."""
    config = AnalyticsConfig.from_env()
    overrides = {}
    if args.mode:
        overrides["history_mode"] = HistoryMode(args.mode)
    if args.days is not None:
        overrides["daily_days"] = args.days
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    return dataclasses.replace(config, **overrides)


def run_single(analyzer: PackageAnalyzer, args: argparse.Namespace, output_dir: Path) -> int:
    try:
        report = analyzer.analyze(args.package, args.package_version)
    except AnalyticsError as e:
        print(f"\nError during analysis: {e}", file=sys.stderr)
        return 1

    print_summary(report)

    results_file = save_results_json(report, output_dir, args.package)
    print(f"\nResults saved to: {results_file}")

    if args.get_csv:
        history_file = export_history_csv(report, output_dir, args.package)
        print(f"History saved to: {history_file}")

    if args.get_worksheets:
        excel_file = export_worksheets(report, output_dir, args.package)
        print(f"Worksheets saved to: {excel_file}")
    return 0


def run_bulk(analyzer: PackageAnalyzer, input_csv: Path, output_dir: Path) -> int:
    rows = _load_input_csv(input_csv)
    summary: List[Dict] = []
    reports: List[AnalysisReport] = []

    for row in tqdm(rows, desc="Analyzing packages"):
        name = row["package_name"]
        version = row["version"]
        try:
            report = analyzer.analyze(name, version)
        except AnalyticsError as e:
            logger.error("Failed to analyze %s@%s: %s", name, version, e)
            failed = dict.fromkeys(BULK_COLUMNS)
            failed.update(package_name=name, version=version, status="error", error=str(e))
            summary.append(failed)
            continue
        reports.append(report)
        summary.append(summary_row(report))

    summary_file = export_bulk_summary_csv(summary, output_dir, input_csv)
    print(f"\nBulk summary saved to: {summary_file}")
    history_file = export_bulk_history_csv(reports, output_dir, input_csv)
    if history_file is not None:
        print(f"Bulk history saved to: {history_file}")

    failures = sum(1 for row in summary if row["status"] == "error")
    print(f"Analyzed {len(summary) - failures}/{len(summary)} packages")
    return 0 if failures == 0 else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.input_csv is None and (not args.package or not args.package_version):
        parser.error("--package and --version are required unless --input-csv is given")
    if args.days is not None and args.days < 1:
        parser.error("--days must be at least 1")

    _setup_logging(args.log_level)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    analyzer = PackageAnalyzer(config=build_config(args))

    if args.input_csv is not None:
        try:
            return run_bulk(analyzer, args.input_csv, output_dir)
        except (OSError, ValueError) as e:
            print(f"Error: cannot read {args.input_csv}: {e}", file=sys.stderr)
            return 1

    return run_single(analyzer, args, output_dir)


if __name__ == "__main__":
    sys.exit(main())
