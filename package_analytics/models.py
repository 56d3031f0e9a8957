"""
Core data models for package analytics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union


class HistoryMode(str, Enum):
    """Which historical download series the report is built from."""

    DAILY = "daily"
    YEARLY = "yearly"


@dataclass(frozen=True)
class PackageIdentity:
    """A package name and the version the caller asked about."""

    name: str
    version: str


@dataclass(frozen=True)
class DownloadPoint:
    """Downloads for a single day."""

    date: date
    downloads: int


@dataclass(frozen=True)
class YearlyWindow:
    """A one-year (or shorter, trailing) date range awaiting resolution."""

    start_date: date
    end_date: date
    year: int

    @property
    def period(self) -> str:
        return f"{self.start_date.isoformat()}:{self.end_date.isoformat()}"


@dataclass(frozen=True)
class DownloadWindow:
    """Downloads aggregated over a yearly window."""

    start_date: date
    end_date: date
    year: int
    downloads: int


@dataclass(frozen=True)
class WindowFound:
    """A window the registry has statistics for."""

    window: DownloadWindow


@dataclass(frozen=True)
class WindowGap:
    """A window the registry has no published statistics for."""

    start_date: date
    end_date: date
    year: int


WindowResult = Union[WindowFound, WindowGap]


@dataclass(frozen=True)
class VulnerabilityMetadata:
    """Audit result passed through from the registry."""

    vulnerabilities: Dict[str, int] = field(default_factory=dict)
    advisories: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.vulnerabilities.values())


@dataclass(frozen=True)
class PackageMetadata:
    """The subset of a registry package document used by the analysis."""

    name: str
    description: Optional[str]
    maintainers: List[Dict[str, Any]]
    creation_date: Optional[datetime]
    publish_dates: Dict[str, datetime] = field(default_factory=dict)


@dataclass(frozen=True)
class PackageInfo:
    """Metadata projection included in a report."""

    name: str
    version: str
    description: Optional[str]
    maintainers: List[Dict[str, Any]]
    last_publish: Optional[datetime]


@dataclass(frozen=True)
class AnalysisReport:
    """Result of analysing one package version."""

    mode: HistoryMode
    total: int
    last_week: int
    history: Sequence[Union[DownloadPoint, DownloadWindow]]
    average_daily: float
    growth_rate: float
    security: VulnerabilityMetadata
    package_info: PackageInfo
    generated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Render the report as a JSON-serialisable dictionary."""
        downloads: Dict[str, Any] = {
            "total": self.total,
            "lastWeek": self.last_week,
            "averageDaily": self.average_daily,
            "growthRate": self.growth_rate,
        }
        if self.mode == HistoryMode.DAILY:
            downloads["daily"] = [
                {"date": point.date.isoformat(), "downloads": point.downloads}
                for point in self.history
            ]
        else:
            downloads["yearly"] = [
                {
                    "startDate": window.start_date.isoformat(),
                    "endDate": window.end_date.isoformat(),
                    "year": window.year,
                    "downloads": window.downloads,
                }
                for window in self.history
            ]

        last_publish = self.package_info.last_publish
        return {
            "mode": self.mode.value,
            "generatedAt": self.generated_at.isoformat(),
            "downloads": downloads,
            "security": {
                "vulnerabilities": dict(self.security.vulnerabilities),
                "advisories": list(self.security.advisories),
            },
            "packageInfo": {
                "name": self.package_info.name,
                "packageVersion": self.package_info.version,
                "description": self.package_info.description,
                "maintainers": list(self.package_info.maintainers),
                "lastPublish": last_publish.isoformat() if last_publish else None,
            },
        }
