"""
Error types raised by the analytics engine and registry client.
"""

from __future__ import annotations

from typing import Optional


class AnalyticsError(Exception):
    """Base class for all package analytics failures."""


class InvalidRequest(AnalyticsError):
    """The package name or version is missing."""


class PackageNotFound(AnalyticsError):
    """The registry has no package with the requested name."""

    def __init__(self, package: str) -> None:
        super().__init__(f"Package not found: {package}")
        self.package = package


class RegistryUnavailable(AnalyticsError):
    """Network failure, timeout or unexpected response from the registry."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class NotFound(AnalyticsError):
    """The registry returned 404 for a downloads query."""

    def __init__(self, url: str) -> None:
        super().__init__(f"No data at {url}")
        self.url = url


class ComputationUndefined(AnalyticsError):
    """A derived metric has no defined value for the given inputs."""
