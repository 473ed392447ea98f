"""Core shared contracts and utilities."""

from core.structured_logging import (
    configure_structured_logging,
    context_scope,
    current_context,
    get_run_id,
    phase_scope,
    set_package_name,
    set_run_id,
)
from core.analyzer_config import (
    AnalyzerConfig,
    ConfigValidationError,
    load_analyzer_config,
    resolve_strict_config_validation,
)
from core.run_artifacts import build_report_path, sanitize_package_name, write_report
from core.package_manifest import (
    EntryFileSet,
    PackageManifest,
    find_entry_points,
    load_package_manifest,
)

__all__ = [
    "configure_structured_logging",
    "context_scope",
    "current_context",
    "get_run_id",
    "phase_scope",
    "set_package_name",
    "set_run_id",
    "AnalyzerConfig",
    "ConfigValidationError",
    "load_analyzer_config",
    "resolve_strict_config_validation",
    "build_report_path",
    "sanitize_package_name",
    "write_report",
    "EntryFileSet",
    "PackageManifest",
    "find_entry_points",
    "load_package_manifest",
]
