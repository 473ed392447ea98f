"""Report artifact helpers: timestamped JSON reports per analyzed package."""

from __future__ import annotations

import json
import os
import re
from datetime import datetime
from typing import Any, Optional

_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_package_name(package_name: str) -> str:
    """Turn a package name (possibly scoped, e.g. ``@org/ui``) into a file stem."""
    stem = _UNSAFE_NAME_RE.sub("_", package_name.strip().lstrip("@"))
    stem = stem.strip("._")
    return stem or "package"


def build_report_path(
    package_name: str,
    output_dir: str,
    now: Optional[datetime] = None,
) -> str:
    """Return ``<output_dir>/<package>_<YYYYMMDD-HHMMSS>.json`` in local time."""
    moment = now or datetime.now()
    stamp = moment.strftime("%Y%m%d-%H%M%S")
    return os.path.join(output_dir, f"{sanitize_package_name(package_name)}_{stamp}.json")


def write_report(
    report: dict[str, Any],
    package_name: str,
    output_dir: str = "output/api_reports",
    now: Optional[datetime] = None,
) -> str:
    """Write a JSON API surface report and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    path = build_report_path(package_name, output_dir, now=now)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return path
