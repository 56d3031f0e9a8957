"""Shared fixtures: an in-memory registry client and a fixed clock."""

from __future__ import annotations

import threading
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

import pytest

from package_analytics.errors import NotFound, PackageNotFound
from package_analytics.models import DownloadPoint, PackageMetadata, VulnerabilityMetadata


FIXED_NOW = datetime(2023, 6, 15, 12, 0, tzinfo=timezone.utc)


class FakeRegistryClient:
    """Serves canned registry data and records every call."""

    def __init__(
        self,
        point: Optional[Dict[str, object]] = None,
        daily: Optional[List[DownloadPoint]] = None,
        metadata: Optional[PackageMetadata] = None,
        audit: Optional[VulnerabilityMetadata] = None,
        failures: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.point = point or {}
        self.daily = daily or []
        self.metadata = metadata
        self.audit = audit or VulnerabilityMetadata()
        self.failures = failures or {}
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def _record(self, *call) -> None:
        with self._lock:
            self.calls.append(call)

    def _maybe_fail(self, key: str) -> None:
        if key in self.failures:
            raise self.failures[key]

    def fetch_download_point(self, package_name: str, period: str) -> int:
        self._record("point", package_name, period)
        self._maybe_fail(period)
        self._maybe_fail("point")
        value = self.point.get(period)
        if value is None:
            raise NotFound(f"https://api.npmjs.org/downloads/point/{period}/{package_name}")
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_daily_range(self, package_name: str, days: int) -> List[DownloadPoint]:
        self._record("daily", package_name, days)
        self._maybe_fail("daily")
        return list(self.daily)

    def fetch_package_metadata(self, package_name: str) -> PackageMetadata:
        self._record("metadata", package_name)
        self._maybe_fail("metadata")
        if self.metadata is None:
            raise PackageNotFound(package_name)
        return self.metadata

    def submit_audit(self, package_name: str, version: str) -> VulnerabilityMetadata:
        self._record("audit", package_name, version)
        self._maybe_fail("audit")
        return self.audit


def make_metadata(
    created: Optional[datetime] = datetime(2020, 1, 1, tzinfo=timezone.utc),
    publish_dates: Optional[Dict[str, datetime]] = None,
) -> PackageMetadata:
    return PackageMetadata(
        name="left-pad",
        description="String left pad",
        maintainers=[{"name": "stevemao", "email": "maochenyan@gmail.com"}],
        creation_date=created,
        publish_dates=publish_dates
        if publish_dates is not None
        else {"1.3.0": datetime(2018, 4, 9, tzinfo=timezone.utc)},
    )


YEARLY_POINTS = {
    "last-week": 7000,
    "2020-01-01:2020-12-31": 100,
    "2021-01-01:2021-12-31": 200,
    "2022-01-01:2022-12-31": 300,
    "2023-01-01:2023-06-15": 150,
}


DAILY_POINTS = [
    DownloadPoint(date=date(2023, 6, 8 + offset), downloads=downloads)
    for offset, downloads in enumerate([1000, 1100, 900, 1200, 1300, 1250, 1500])
]


@pytest.fixture
def audit() -> VulnerabilityMetadata:
    return VulnerabilityMetadata(
        vulnerabilities={"low": 1, "moderate": 2, "high": 0, "critical": 0},
        advisories=[{"id": 1, "title": "Prototype pollution", "severity": "moderate"}],
    )


@pytest.fixture
def client(audit) -> FakeRegistryClient:
    return FakeRegistryClient(
        point=dict(YEARLY_POINTS),
        daily=list(DAILY_POINTS),
        metadata=make_metadata(),
        audit=audit,
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
