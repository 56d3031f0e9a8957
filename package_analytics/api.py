"""
Framework-neutral request handling for an HTTP front end.

A web layer passes the decoded JSON body to ``handle_analyze_request`` and
returns the resulting status code and body unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from .analyzer import PackageAnalyzer
from .errors import AnalyticsError, InvalidRequest


logger = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to analyze package"


def _first_present(payload: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return str(value)
    return None


def handle_analyze_request(
    payload: Any,
    analyzer: PackageAnalyzer,
) -> Tuple[int, Dict[str, Any]]:
    """Analyze the package named in a request body.

    Returns 200 with the report, 400 for a missing name or version or a body
    that is not a JSON object, and 500 with a generic message for every other
    failure.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        return 400, {"error": "Request body must be a JSON object"}

    name = _first_present(payload, "packageName", "name")
    version = _first_present(payload, "packageVersion", "version")

    try:
        report = analyzer.analyze(name, version)
    except InvalidRequest as exc:
        return 400, {"error": str(exc)}
    except AnalyticsError as exc:
        logger.error("Analysis of %s@%s failed: %s", name, version, exc)
        return 500, {"error": GENERIC_ERROR}
    except Exception:
        logger.exception("Unexpected error analyzing %s@%s", name, version)
        return 500, {"error": GENERIC_ERROR}

    return 200, report.to_dict()
