"""
Interfaces for registry clients.
"""

from __future__ import annotations

from typing import List, Protocol

from .models import DownloadPoint, PackageMetadata, VulnerabilityMetadata


class RegistryClient(Protocol):
    """Read download statistics, metadata and audits from a package registry."""

    def fetch_download_point(self, package_name: str, period: str) -> int:
        ...

    def fetch_daily_range(self, package_name: str, days: int) -> List[DownloadPoint]:
        ...

    def fetch_package_metadata(self, package_name: str) -> PackageMetadata:
        ...

    def submit_audit(self, package_name: str, version: str) -> VulnerabilityMetadata:
        ...
