#!/usr/bin/env python3
"""
Command-line entry point for public API surface analysis of a local package.

Writes the JSON report to a timestamped file and echoes it to stdout.
Logs go to stderr.

Usage:
    python run_analysis.py ../my-project/
    python run_analysis.py ./packages/ui --exposes '{"./Button": "./src/Button.tsx"}'
    python run_analysis.py ./packages/ui --exposes-config webpack.config.js --config surface.yml
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Public API surface analyzer for JavaScript / TypeScript packages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_analysis.py ../my-project/\n"
            "  python run_analysis.py ./pkg --exposes exposes.yml\n"
        ),
    )

    parser.add_argument(
        "package_path",
        nargs="?",
        help="Path to the package directory containing package.json.",
    )
    parser.add_argument(
        "--exposes",
        default=None,
        help=(
            "Explicit exposure mapping: inline JSON object or path to a "
            "JSON/YAML file mapping exposed names to relative module paths."
        ),
    )
    parser.add_argument(
        "--exposes-config",
        default=None,
        help="Scan only this build config file (relative to the package) for exposures.",
    )
    parser.add_argument(
        "--config",
        default=os.getenv("API_SURFACE_CONFIG"),
        help="Optional YAML analyzer configuration. Default: $API_SURFACE_CONFIG",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the report file. Default: output/api_reports",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (stderr).",
    )

    return parser.parse_args(argv)


def load_exposures_override(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Load ``--exposes`` from inline JSON or a JSON/YAML file.

    Raises:
        ValueError: If the mapping is not an object.
    """
    if raw is None:
        return None

    if os.path.isfile(raw):
        with open(raw, "r", encoding="utf-8") as f:
            text = f.read()
        payload = json.loads(text) if raw.endswith(".json") else yaml.safe_load(text)
    else:
        payload = json.loads(raw)

    if not isinstance(payload, dict):
        raise ValueError("--exposes must be a mapping of exposed name to module path")
    return payload


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    from core.analyzer_config import ConfigValidationError, load_analyzer_config, resolve_strict_config_validation
    from core.run_artifacts import write_report
    from core.structured_logging import configure_structured_logging, set_run_id
    from surface.analyzer import analyze_package

    args = parse_args(argv)
    configure_structured_logging(getattr(logging, args.log_level))
    run_id = set_run_id()

    if not args.package_path:
        logger.error("Please provide the path of a local package.")
        logger.error("Usage: python run_analysis.py <path-to-local-package>")
        return 1

    package_root = os.path.abspath(args.package_path)
    logger.info("Run %s: analyzing local package %s", run_id, package_root)

    try:
        config = load_analyzer_config(args.config, strict=resolve_strict_config_validation())
        exposures = load_exposures_override(args.exposes)
    except ConfigValidationError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Invalid --exposes mapping: %s", e)
        return 1

    try:
        report = analyze_package(
            package_root,
            config=config,
            exposures_override=exposures,
            exposures_config_path=args.exposes_config,
        )
    except FileNotFoundError as e:
        logger.error("File error: %s", e)
        return 1
    except ValueError as e:
        logger.error("Invalid package manifest: %s", e)
        return 1

    payload = report.to_dict()
    output_dir = args.output_dir or config.output_dir
    try:
        path = write_report(payload, report.package_name, output_dir=output_dir)
        logger.info("Report written to %s", path)
    except OSError as e:
        logger.error("Could not write report to %s: %s", output_dir, e)

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
