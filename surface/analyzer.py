"""
High-level orchestrator for API surface analysis of one package.

Seeds the worklist from the manifest's entry points and the exposure map,
drains it with the graph walker and aggregates the report.
"""

import logging
import traceback
from typing import Mapping, Optional

from core.analyzer_config import AnalyzerConfig
from core.package_manifest import find_entry_points, load_package_manifest
from core.structured_logging import get_run_id, phase_scope, set_package_name
from surface.context import AnalysisContext
from surface.exposures import find_exposures
from surface.report import Report, ReportBuilder
from surface.walker import GraphWalker

logger = logging.getLogger(__name__)


def analyze_package(
    package_path: str,
    config: Optional[AnalyzerConfig] = None,
    exposures_override: Optional[Mapping[str, object]] = None,
    exposures_config_path: Optional[str] = None,
) -> Report:
    """Compute the public API surface report of a package.

    Args:
        package_path: Directory containing ``package.json``.
        config: Analyzer configuration (defaults when None).
        exposures_override: Explicit exposure name -> relative path mapping.
        exposures_config_path: Single build config file to scan for exposures.

    Returns:
        The aggregated Report. Problems met after the manifest was loaded are
        listed in ``Report.errors`` rather than raised.

    Raises:
        FileNotFoundError: If the package directory or its manifest is missing.

    Example:
        >>> report = analyze_package("./node_modules/left-pad")
        >>> report.value.total
        1
    """
    config = config or AnalyzerConfig()
    manifest = load_package_manifest(package_path)
    set_package_name(manifest.name)
    logger.info("Analyzing package %s at %s", manifest.name, manifest.root)

    builder = ReportBuilder(manifest.name, manifest.root)
    context = AnalysisContext(package_root=manifest.root, config=config)
    walker = GraphWalker(context, builder)

    try:
        with phase_scope("entry_points"):
            entries = find_entry_points(manifest, config)
            builder.set_entry_points(entries.to_dict())
            if entries.is_empty():
                builder.add_error("No valid value or typed entry files were found.")
            walker.enqueue(entries.all_entries())

        with phase_scope("exposures"):
            exposures = find_exposures(
                context,
                exposures_override=exposures_override,
                exposures_config_path=exposures_config_path,
            )
            builder.merge(exposures)
            walker.enqueue(exposures.discovered)

        with phase_scope("traversal"):
            walker.run()
    except Exception as e:
        logger.error("Analysis of %s aborted: %s", manifest.name, e, exc_info=True)
        builder.add_error(f"{e}\n{traceback.format_exc()}")

    with phase_scope("aggregate"):
        report = builder.build(run_id=get_run_id())
        logger.info(
            "Report ready: %d value, %d type, %d exposure exports; %d errors",
            report.value.total,
            report.type.total,
            report.exposure.total,
            len(report.errors),
        )
    return report
