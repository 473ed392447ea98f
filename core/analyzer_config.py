"""Analyzer configuration loading and validation.

Configuration is optional: without a file every setting keeps its default.
A YAML file may override any field of :class:`AnalyzerConfig`. Problems are
reported as warnings in non-strict mode and raise
:class:`ConfigValidationError` in strict mode.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_VALUE_SUFFIXES: tuple[str, ...] = (".js", ".mjs", ".cjs", ".jsx")

# Longest first: ".d.ts" must win over ".ts" when classifying a path.
DEFAULT_TYPED_SUFFIXES: tuple[str, ...] = (
    ".d.mts",
    ".d.cts",
    ".d.ts",
    ".mts",
    ".cts",
    ".tsx",
    ".ts",
)

DEFAULT_RESOLVE_SUFFIXES: tuple[str, ...] = (
    ".js",
    ".mjs",
    ".cjs",
    ".jsx",
    ".ts",
    ".tsx",
    ".d.ts",
    ".mts",
    ".cts",
    ".d.mts",
    ".d.cts",
)

DEFAULT_EXPOSURE_CONFIG_PATTERNS: tuple[str, ...] = (
    "webpack.config.*",
    "webpack.*.js",
    "webpack.*.mjs",
    "webpack.*.cjs",
    "webpack.*.ts",
    "rspack.config.*",
    "rsbuild.config.*",
    "vite.config.*",
    "module-federation.config.*",
    "federation.config.*",
)

DEFAULT_IGNORED_DIRS: tuple[str, ...] = ("node_modules", ".git")


class ConfigValidationError(RuntimeError):
    """Raised when strict configuration validation fails."""


@dataclass(frozen=True)
class AnalyzerConfig:
    """Tunable knobs of one analysis run."""

    value_suffixes: tuple[str, ...] = DEFAULT_VALUE_SUFFIXES
    typed_suffixes: tuple[str, ...] = DEFAULT_TYPED_SUFFIXES
    resolve_suffixes: tuple[str, ...] = DEFAULT_RESOLVE_SUFFIXES
    exposure_config_patterns: tuple[str, ...] = DEFAULT_EXPOSURE_CONFIG_PATTERNS
    ignored_dirs: tuple[str, ...] = DEFAULT_IGNORED_DIRS
    vendor_dir: str = "node_modules"
    commonjs_exports: bool = True
    output_dir: str = "output/api_reports"

    def is_typed_path(self, path: str) -> bool:
        return path.endswith(self.typed_suffixes)

    def is_value_path(self, path: str) -> bool:
        return path.endswith(self.value_suffixes)


_TUPLE_FIELDS = {
    "value_suffixes",
    "typed_suffixes",
    "resolve_suffixes",
    "exposure_config_patterns",
    "ignored_dirs",
}
_STR_FIELDS = {"vendor_dir", "output_dir"}
_BOOL_FIELDS = {"commonjs_exports"}


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag("STRICT_CONFIG_VALIDATION", default=default)


def _fail(msg: str, strict: bool) -> None:
    if strict:
        raise ConfigValidationError(msg)
    logger.warning("%s; ignoring", msg)


def _coerce_overrides(payload: dict[str, Any], strict: bool) -> dict[str, Any]:
    known = {f.name for f in fields(AnalyzerConfig)}
    overrides: dict[str, Any] = {}
    for key, value in payload.items():
        if key not in known:
            _fail(f"Unknown analyzer config key '{key}'", strict)
            continue
        if key in _TUPLE_FIELDS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                _fail(f"Config key '{key}' must be a list of strings", strict)
                continue
            overrides[key] = tuple(value)
        elif key in _STR_FIELDS:
            if not isinstance(value, str) or not value.strip():
                _fail(f"Config key '{key}' must be a non-empty string", strict)
                continue
            overrides[key] = value.strip()
        elif key in _BOOL_FIELDS:
            if not isinstance(value, bool):
                _fail(f"Config key '{key}' must be a boolean", strict)
                continue
            overrides[key] = value
    return overrides


def load_analyzer_config(
    config_path: Optional[str] = None,
    strict: bool = False,
) -> AnalyzerConfig:
    """Load analyzer configuration from an optional YAML file.

    In non-strict mode read/parse failures fall back to defaults.
    In strict mode they raise ``ConfigValidationError``.
    """
    config = AnalyzerConfig()
    if not config_path:
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Analyzer config file not found: {config_path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return config
    except yaml.YAMLError as exc:
        msg = f"Failed to parse analyzer config YAML at {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return config

    if payload is None:
        logger.info("Analyzer config %s is empty; using defaults", config_path)
        return config

    if not isinstance(payload, dict):
        msg = f"Unexpected analyzer config payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return config

    overrides = _coerce_overrides(payload, strict)
    logger.debug("Applying analyzer config overrides: %s", sorted(overrides))
    return replace(config, **overrides)
