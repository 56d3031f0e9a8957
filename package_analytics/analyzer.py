"""
Analysis engine combining download statistics, metadata and audit results.
"""

from __future__ import annotations

import logging
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Union

from .config import DEFAULT_CONFIG, AnalyticsConfig
from .errors import ComputationUndefined, InvalidRequest, NotFound, PackageNotFound
from .interfaces import RegistryClient
from .models import (
    AnalysisReport,
    DownloadPoint,
    DownloadWindow,
    HistoryMode,
    PackageIdentity,
    PackageInfo,
    PackageMetadata,
)
from .registry import NpmRegistryClient
from .time_utils import age_in_days, generate_yearly_windows, utc_now
from .yearly import resolve_yearly_downloads


logger = logging.getLogger(__name__)

History = Sequence[Union[DownloadPoint, DownloadWindow]]

GROWTH_RATE_SENTINEL = 0.0
AVERAGE_DAILY_SENTINEL = 0.0


def compute_growth_rate(history: History) -> float:
    """Percentage change from the first to the last entry, one decimal.

    Raises:
        ComputationUndefined: the series is empty or starts at zero.
    """
    if not history:
        raise ComputationUndefined("Growth rate needs at least one data point")
    earliest = history[0].downloads
    latest = history[-1].downloads
    if earliest == 0:
        raise ComputationUndefined("Growth rate is undefined when the earliest count is zero")
    return round((latest - earliest) / earliest * 100, 1)


def compute_average_daily(total: int, days: int) -> float:
    """Average downloads per day, two decimals."""
    if days <= 0:
        raise ComputationUndefined(f"Cannot average over {days} days")
    return round(total / days, 2)


def validate_request(package_name: Optional[str], package_version: Optional[str]) -> PackageIdentity:
    """Reject missing or blank names and versions before any remote call."""
    name = (package_name or "").strip()
    version = (package_version or "").strip()
    if not name or not version:
        raise InvalidRequest("Package name and version are required")
    return PackageIdentity(name=name, version=version)


class PackageAnalyzer:
    """Build an AnalysisReport for a package version."""

    def __init__(
        self,
        client: Optional[RegistryClient] = None,
        config: AnalyticsConfig = DEFAULT_CONFIG,
        mode: Optional[HistoryMode] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the analyzer.

        Args:
            client: Registry client; an NpmRegistryClient is built from config
                when omitted
            config: Endpoints, timeouts and worker counts
            mode: History series to report; defaults to config.history_mode
            clock: Returns the current UTC time, used as "now" for windows
                and package age
        """
        self.config = config
        self.client = client if client is not None else NpmRegistryClient(config)
        self.mode = HistoryMode(mode) if mode is not None else config.history_mode
        self.clock = clock

    def analyze(self, package_name: str, package_version: str) -> AnalysisReport:
        """Run the four registry fetches concurrently and assemble a report.

        Args:
            package_name: Registry package name
            package_version: Version whose publish time and audit are reported

        Returns:
            AnalysisReport for the package

        Raises:
            InvalidRequest: name or version missing
            PackageNotFound: the registry has no such package
            RegistryUnavailable: any fetch failed at the transport level
        """
        identity = validate_request(package_name, package_version)
        now = self.clock()
        logger.info("Analyzing %s@%s (%s history)", identity.name, identity.version, self.mode.value)

        with ThreadPoolExecutor(max_workers=max(self.config.max_workers, 1)) as executor:
            # metadata goes first so the yearly history branch can wait on it
            metadata_future = executor.submit(self.client.fetch_package_metadata, identity.name)
            point_future = executor.submit(self._fetch_point, identity.name)
            history_future = executor.submit(self._fetch_history, identity.name, metadata_future, now)
            audit_future = executor.submit(self.client.submit_audit, identity.name, identity.version)

            futures: List[Future] = [point_future, history_future, audit_future, metadata_future]
            wait(futures, return_when=ALL_COMPLETED)

        # first failure in declaration order wins
        last_week = point_future.result()
        history = history_future.result()
        security = audit_future.result()
        metadata = metadata_future.result()

        total = sum(entry.downloads for entry in history)
        if self.mode == HistoryMode.DAILY:
            average_daily = self._average(total, self.config.daily_days, identity)
        elif metadata.creation_date is None:
            logger.warning("No creation date for %s, average daily set to %s",
                           identity.name, AVERAGE_DAILY_SENTINEL)
            average_daily = AVERAGE_DAILY_SENTINEL
        else:
            age = age_in_days(metadata.creation_date, now)
            average_daily = self._average(total, age, identity)

        try:
            growth_rate = compute_growth_rate(history)
        except ComputationUndefined as exc:
            logger.warning("%s for %s, growth rate set to %s", exc, identity.name, GROWTH_RATE_SENTINEL)
            growth_rate = GROWTH_RATE_SENTINEL

        return AnalysisReport(
            mode=self.mode,
            total=total,
            last_week=last_week,
            history=tuple(history),
            average_daily=average_daily,
            growth_rate=growth_rate,
            security=security,
            package_info=self._project_metadata(metadata, identity),
            generated_at=now,
        )

    def _fetch_point(self, package_name: str) -> int:
        try:
            return self.client.fetch_download_point(package_name, self.config.point_period)
        except NotFound as exc:
            raise PackageNotFound(package_name) from exc

    def _fetch_history(
        self,
        package_name: str,
        metadata_future: "Future[PackageMetadata]",
        now: datetime,
    ) -> History:
        if self.mode == HistoryMode.DAILY:
            try:
                return self.client.fetch_daily_range(package_name, self.config.daily_days)
            except NotFound as exc:
                raise PackageNotFound(package_name) from exc

        metadata = metadata_future.result()
        if metadata.creation_date is None:
            logger.warning("Package %s has no creation date, yearly series is empty", package_name)
            return []
        windows = generate_yearly_windows(metadata.creation_date, now)
        logger.info("Resolving %d yearly windows for %s", len(windows), package_name)
        return resolve_yearly_downloads(
            self.client, package_name, windows, max_workers=self.config.window_workers
        )

    def _average(self, total: int, days: int, identity: PackageIdentity) -> float:
        try:
            return compute_average_daily(total, days)
        except ComputationUndefined as exc:
            logger.warning("%s for %s, average daily set to %s", exc, identity.name, AVERAGE_DAILY_SENTINEL)
            return AVERAGE_DAILY_SENTINEL

    @staticmethod
    def _project_metadata(metadata: PackageMetadata, identity: PackageIdentity) -> PackageInfo:
        return PackageInfo(
            name=metadata.name,
            version=identity.version,
            description=metadata.description,
            maintainers=list(metadata.maintainers),
            last_publish=metadata.publish_dates.get(identity.version),
        )
