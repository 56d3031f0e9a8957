"""
npm registry client.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .config import DEFAULT_CONFIG, AnalyticsConfig
from .errors import NotFound, PackageNotFound, RegistryUnavailable
from .interfaces import RegistryClient
from .models import DownloadPoint, PackageMetadata, VulnerabilityMetadata
from .time_utils import parse_timestamp


logger = logging.getLogger(__name__)

AUDIT_PATH = "/-/npm/v1/security/audits"
_TIME_META_KEYS = ("created", "modified")

# raised by the parsers when a payload has the wrong shape
_MALFORMED = (AttributeError, TypeError, ValueError)


def encode_package_name(package_name: str) -> str:
    """URL-encode a package name, keeping the scope marker of @scope/name."""
    return quote(package_name, safe="@")


class NpmRegistryClient(RegistryClient):
    """Issue single-attempt reads against the npm registry and downloads API."""

    def __init__(
        self,
        config: AnalyticsConfig = DEFAULT_CONFIG,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": config.user_agent, "Accept": "application/json"}
        )

    def fetch_download_point(self, package_name: str, period: str) -> int:
        url = (
            f"{self.config.downloads_url}/downloads/point/"
            f"{period}/{encode_package_name(package_name)}"
        )
        logger.info("Fetching %s downloads for %s", period, package_name)
        data = self._request("GET", url)
        downloads = data.get("downloads")
        if downloads is None:
            raise RegistryUnavailable(
                f"'downloads' missing in point response for {package_name}", url=url
            )
        try:
            return int(downloads)
        except _MALFORMED as exc:
            raise RegistryUnavailable(f"Malformed download count from {url}", url=url) from exc

    def fetch_daily_range(self, package_name: str, days: int) -> List[DownloadPoint]:
        url = (
            f"{self.config.downloads_url}/downloads/range/"
            f"last-{days}-days/{encode_package_name(package_name)}"
        )
        logger.info("Fetching %d days of daily downloads for %s", days, package_name)
        data = self._request("GET", url)
        try:
            return parse_daily_range(data)
        except _MALFORMED as exc:
            raise RegistryUnavailable(f"Malformed range response from {url}: {exc}", url=url) from exc

    def fetch_package_metadata(self, package_name: str) -> PackageMetadata:
        url = f"{self.config.registry_url}/{encode_package_name(package_name)}"
        logger.info("Fetching metadata for %s", package_name)
        try:
            data = self._request("GET", url)
        except NotFound as exc:
            raise PackageNotFound(package_name) from exc
        try:
            return parse_package_metadata(data, package_name)
        except _MALFORMED as exc:
            raise RegistryUnavailable(f"Malformed package document from {url}: {exc}", url=url) from exc

    def submit_audit(self, package_name: str, version: str) -> VulnerabilityMetadata:
        url = f"{self.config.registry_url}{AUDIT_PATH}"
        payload = {
            "name": package_name,
            "version": version,
            "requires": {package_name: version},
            "dependencies": {package_name: {"version": version}},
        }
        logger.info("Submitting audit for %s@%s", package_name, version)
        try:
            data = self._request("POST", url, json=payload)
        except NotFound as exc:
            raise RegistryUnavailable(
                "Security audit endpoint not found", status_code=404, url=url
            ) from exc
        try:
            return parse_audit(data)
        except _MALFORMED as exc:
            raise RegistryUnavailable(f"Malformed audit response from {url}: {exc}", url=url) from exc

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method, url, timeout=self.config.request_timeout, **kwargs
            )
        except requests.Timeout as exc:
            raise RegistryUnavailable(f"Timed out calling {url}", url=url) from exc
        except requests.RequestException as exc:
            raise RegistryUnavailable(f"Network error calling {url}: {exc}", url=url) from exc

        with response:
            if response.status_code == 404:
                raise NotFound(url)
            if not response.ok:
                raise RegistryUnavailable(
                    f"Registry returned HTTP {response.status_code} for {url}",
                    status_code=response.status_code,
                    url=url,
                )
            try:
                data = response.json()
            except ValueError as exc:
                raise RegistryUnavailable(f"Invalid JSON from {url}", url=url) from exc

        if not isinstance(data, dict):
            raise RegistryUnavailable(f"Unexpected payload from {url}", url=url)
        return data


def parse_daily_range(data: Dict[str, Any]) -> List[DownloadPoint]:
    """Daily points from a range response, oldest first; rows without a day are skipped."""
    points: List[DownloadPoint] = []
    for row in data.get("downloads") or []:
        day = row.get("day")
        downloads = row.get("downloads")
        if not day or downloads is None:
            continue
        points.append(DownloadPoint(date=date.fromisoformat(day), downloads=int(downloads)))
    return sorted(points, key=lambda point: point.date)


def parse_package_metadata(data: Dict[str, Any], package_name: str) -> PackageMetadata:
    """Project a registry package document onto PackageMetadata."""
    time_data = data.get("time") or {}
    publish_dates = {}
    for ver, timestamp in time_data.items():
        if ver in _TIME_META_KEYS:
            continue
        published = parse_timestamp(timestamp)
        if published is not None:
            publish_dates[ver] = published

    return PackageMetadata(
        name=data.get("name") or package_name,
        description=data.get("description"),
        maintainers=list(data.get("maintainers") or []),
        creation_date=parse_timestamp(time_data.get("created")),
        publish_dates=publish_dates,
    )


def parse_audit(data: Dict[str, Any]) -> VulnerabilityMetadata:
    """Normalise an audit response; advisories keyed by id become a list."""
    metadata = data.get("metadata") or {}
    vulnerabilities = {
        severity: int(count)
        for severity, count in (metadata.get("vulnerabilities") or {}).items()
    }
    advisories = data.get("advisories") or []
    if isinstance(advisories, dict):
        advisories = list(advisories.values())
    return VulnerabilityMetadata(vulnerabilities=vulnerabilities, advisories=list(advisories))
