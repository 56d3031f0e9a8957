"""
Tunable parameters for the package analytics engine.

Override by constructing a new AnalyticsConfig, with ``dataclasses.replace``
on DEFAULT_CONFIG, or through PACKAGE_ANALYTICS_* environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from .models import HistoryMode


ENV_PREFIX = "PACKAGE_ANALYTICS_"


@dataclass(frozen=True)
class AnalyticsConfig:
    """Immutable configuration shared by the client and the analyzer."""

    # ── Registry endpoints ────────────────────────────────────────────────────
    registry_url: str = "https://registry.npmjs.org"
    # Package documents and the security audit service.

    downloads_url: str = "https://api.npmjs.org"
    # Point and range download statistics.

    user_agent: str = "package-analytics/0.1.0"

    # ── Network ───────────────────────────────────────────────────────────────
    request_timeout: float = 10.0
    # Seconds per remote call. Expiry is reported as RegistryUnavailable.

    max_workers: int = 4
    # Threads for the top-level fetches (point stats, history, audit, metadata).

    window_workers: int = 4
    # Threads for per-window download lookups in yearly mode.

    # ── Report shape ──────────────────────────────────────────────────────────
    history_mode: HistoryMode = HistoryMode.YEARLY

    daily_days: int = 7
    # Length of the trailing daily series in daily mode, and the divisor for
    # its average.

    point_period: str = "last-week"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        base: Optional["AnalyticsConfig"] = None,
    ) -> "AnalyticsConfig":
        """Build a config from PACKAGE_ANALYTICS_<FIELD> variables."""
        environ = os.environ if environ is None else environ
        base = base or DEFAULT_CONFIG
        overrides = {}
        for item in fields(cls):
            raw = environ.get(f"{ENV_PREFIX}{item.name.upper()}")
            if raw is None or raw == "":
                continue
            current = getattr(base, item.name)
            if isinstance(current, HistoryMode):
                overrides[item.name] = HistoryMode(raw.lower())
            elif isinstance(current, bool):
                overrides[item.name] = raw.lower() in ("1", "true", "yes")
            elif isinstance(current, int):
                overrides[item.name] = int(raw)
            elif isinstance(current, float):
                overrides[item.name] = float(raw)
            else:
                overrides[item.name] = raw
        return cls(**{**_as_kwargs(base), **overrides})


def _as_kwargs(config: AnalyticsConfig) -> dict:
    return {item.name: getattr(config, item.name) for item in fields(config)}


DEFAULT_CONFIG = AnalyticsConfig()
