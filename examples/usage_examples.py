#!/usr/bin/env python3
"""
Example script showing how to use the package-analytics tool.
"""

import dataclasses
import json
from pathlib import Path

from package_analytics.analyzer import PackageAnalyzer
from package_analytics.api import handle_analyze_request
from package_analytics.config import DEFAULT_CONFIG
from package_analytics.models import HistoryMode
from package_analytics.reporting import export_worksheets


def example_yearly_analysis():
    """Example: Lifetime downloads split into yearly windows."""
    print("="*60)
    print("Example 1: Yearly Analysis")
    print("="*60)

    analyzer = PackageAnalyzer(mode=HistoryMode.YEARLY)
    report = analyzer.analyze("express", "4.18.2")

    print(f"\nPackage: {report.package_info.name}@{report.package_info.version}")
    print(f"Published: {report.package_info.last_publish}")
    for window in report.history:
        print(f"  {window.year}: {window.downloads:,}")
    print(f"Average daily downloads: {report.average_daily:,.2f}")
    print(f"Growth rate: {report.growth_rate:+.1f}%")


def example_daily_analysis():
    """Example: Trailing two weeks of daily downloads."""
    print("\n" + "="*60)
    print("Example 2: Daily Analysis")
    print("="*60)

    config = dataclasses.replace(DEFAULT_CONFIG, history_mode=HistoryMode.DAILY, daily_days=14)
    report = PackageAnalyzer(config=config).analyze("left-pad", "1.3.0")

    print(f"\nLast week: {report.last_week:,}")
    print(f"Average daily downloads: {report.average_daily:,.2f}")
    print(f"Growth rate: {report.growth_rate:+.1f}%")
    print(f"Vulnerabilities: {report.security.vulnerabilities}")


def example_request_handler():
    """Example: What a web endpoint would return."""
    print("\n" + "="*60)
    print("Example 3: Request Handler")
    print("="*60)

    analyzer = PackageAnalyzer()
    status, body = handle_analyze_request({"packageName": "lodash"}, analyzer)
    print(f"\nMissing version -> {status}: {body}")

    status, body = handle_analyze_request(
        {"packageName": "lodash", "packageVersion": "4.17.21"}, analyzer
    )
    print(f"Valid request -> {status}")
    print(json.dumps(body["downloads"], indent=2)[:400])


def example_worksheets():
    """Example: Export a report to Excel."""
    print("\n" + "="*60)
    print("Example 4: Worksheets")
    print("="*60)

    report = PackageAnalyzer().analyze("minimist", "1.2.0")
    excel_file = export_worksheets(report, Path("./output/example4"), "minimist")
    print(f"\nWorksheets saved to: {excel_file}")


if __name__ == "__main__":
    print("\nPackage Analytics - Usage Examples")
    print("="*60)
    print("\nNote: These examples call the public npm registry.\n")

    example_yearly_analysis()
    example_daily_analysis()
    example_request_handler()
    example_worksheets()
