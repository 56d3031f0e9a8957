"""
Resolve yearly download windows against the registry.
"""

from __future__ import annotations

import logging
from concurrent.futures import ALL_COMPLETED, ThreadPoolExecutor, wait
from typing import List, Sequence

from .errors import NotFound
from .interfaces import RegistryClient
from .models import DownloadWindow, WindowFound, WindowGap, WindowResult, YearlyWindow


logger = logging.getLogger(__name__)


def resolve_window(client: RegistryClient, package_name: str, window: YearlyWindow) -> WindowResult:
    """Look up downloads for one window; a 404 yields a gap, not an error."""
    try:
        downloads = client.fetch_download_point(package_name, window.period)
    except NotFound:
        logger.info("No download statistics for %s in %s, skipping", package_name, window.period)
        return WindowGap(start_date=window.start_date, end_date=window.end_date, year=window.year)

    return WindowFound(
        window=DownloadWindow(
            start_date=window.start_date,
            end_date=window.end_date,
            year=window.year,
            downloads=downloads,
        )
    )


def resolve_yearly_downloads(
    client: RegistryClient,
    package_name: str,
    windows: Sequence[YearlyWindow],
    max_workers: int = 4,
) -> List[DownloadWindow]:
    """Resolve all windows concurrently and return the found ones by start date.

    Gaps are dropped. Any failure other than a per-window 404 is raised once
    every lookup has settled.
    """
    if not windows:
        return []

    with ThreadPoolExecutor(max_workers=max(max_workers, 1)) as executor:
        futures = [
            executor.submit(resolve_window, client, package_name, window)
            for window in windows
        ]
        wait(futures, return_when=ALL_COMPLETED)

    resolved: List[DownloadWindow] = []
    for future in futures:
        result = future.result()
        if isinstance(result, WindowFound):
            resolved.append(result.window)

    gaps = len(windows) - len(resolved)
    if gaps:
        logger.info("Dropped %d of %d yearly windows for %s", gaps, len(windows), package_name)
    return sorted(resolved, key=lambda window: window.start_date)
