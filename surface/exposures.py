"""
Module Federation exposure discovery.

An exposure map (``exposes: { './Button': './src/Button' }``) is either
handed in explicitly or found in the package's build configuration files:
first an object under a key literally named ``exposes``, otherwise the first
object literal whose keys are mostly ``./``-prefixed aliases.
"""

import fnmatch
import logging
import os
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from tree_sitter import Node

from surface.config import (
    EXPOSES_KEY,
    EXPOSURE_KEY_PREFIX,
    IDENTIFIER_KEY_TYPES,
    OBJECT_NODE,
    PAIR_NODE,
    SHORTHAND_PROPERTY,
    STRING_NODE,
)
from surface.context import AnalysisContext
from surface.models import ExportCategory, ExtractionResult
from surface.parser import ModuleParseError, iter_nodes, node_text, parse_file, string_value

logger = logging.getLogger(__name__)

# Strictly more than this share of keys must start with "./"
EXPOSURE_KEY_RATIO_THRESHOLD: float = 0.5

# (exposed name, string target or None for non-string values)
ExposureEntry = Tuple[str, Optional[str]]


def is_exposure_like(keys: Sequence[str]) -> bool:
    """Decide whether an object's string/identifier keys look like an exposure map.

    Example:
        >>> is_exposure_like(["./a", "./b", "name"])
        True
        >>> is_exposure_like(["./a", "name"])
        False
    """
    if not keys:
        return False
    prefixed = sum(1 for key in keys if key.startswith(EXPOSURE_KEY_PREFIX))
    return prefixed / len(keys) > EXPOSURE_KEY_RATIO_THRESHOLD


def _key_name(key: Node) -> Optional[str]:
    if key.type == STRING_NODE:
        return string_value(key)
    if key.type in IDENTIFIER_KEY_TYPES:
        return node_text(key)
    return None


def object_properties(obj: Node) -> List[Tuple[str, Optional[Node]]]:
    """``(key, value_node)`` pairs of an object literal with string or identifier keys.

    Shorthand properties (``{ exposes }``) yield their identifier as value.
    """
    properties: List[Tuple[str, Optional[Node]]] = []
    for prop in obj.named_children:
        if prop.type == PAIR_NODE:
            key = prop.child_by_field_name("key")
            name = _key_name(key) if key is not None else None
            if name is not None:
                properties.append((name, prop.child_by_field_name("value")))
        elif prop.type == SHORTHAND_PROPERTY:
            properties.append((node_text(prop), prop))
    return properties


def _find_object_binding(root: Node, name: str) -> Optional[Node]:
    """Object literal assigned to ``const name = {...}`` anywhere in the file."""
    for node in iter_nodes(root):
        if node.type != "variable_declarator":
            continue
        target = node.child_by_field_name("name")
        value = node.child_by_field_name("value")
        if target is not None and node_text(target) == name and value is not None and value.type == OBJECT_NODE:
            return value
    return None


def find_exposes_object(root: Node) -> Optional[Node]:
    """Exact match: the object literal under the first ``exposes`` key (pre-order)."""
    for node in iter_nodes(root):
        if node.type != OBJECT_NODE:
            continue
        for key, value in object_properties(node):
            if key != EXPOSES_KEY or value is None:
                continue
            if value.type == OBJECT_NODE:
                return value
            if value.type in ("identifier", SHORTHAND_PROPERTY):
                bound = _find_object_binding(root, node_text(value))
                if bound is not None:
                    return bound
    return None


def find_exposure_like_object(root: Node) -> Optional[Node]:
    """Heuristic match: the first object literal passing :func:`is_exposure_like`."""
    for node in iter_nodes(root):
        if node.type != OBJECT_NODE:
            continue
        keys = [key for key, _ in object_properties(node)]
        if is_exposure_like(keys):
            return node
    return None


def read_exposure_entries(obj: Node) -> List[ExposureEntry]:
    entries: List[ExposureEntry] = []
    for key, value in object_properties(obj):
        target = string_value(value) if value is not None and value.type == STRING_NODE else None
        entries.append((key, target))
    return entries


def record_exposures(
    entries: Iterable[ExposureEntry],
    base_dir: str,
    context: AnalysisContext,
    result: ExtractionResult,
) -> None:
    """Turn exposure entries into Exposure records and resolvable modules."""
    for name, target in entries:
        result.add(name, ExportCategory.EXPOSURE, False)
        if target is None:
            logger.debug("Exposure '%s' has a non-string target; not traversed", name)
            continue
        resolved = context.resolver.resolve(base_dir, target)
        if resolved is None:
            result.errors.append(f"Exposure target not found for '{name}': {target}")
            continue
        result.discovered.append(resolved)


def discover_config_files(package_root: str, patterns: Sequence[str], ignored_dirs: Sequence[str]) -> List[str]:
    """Recursively find build configuration files that may declare exposures.

    Returns:
        Sorted absolute paths.
    """
    found = []
    ignored = set(ignored_dirs)
    for root, dirs, files in os.walk(package_root):
        dirs[:] = [d for d in dirs if d not in ignored]
        for name in files:
            if any(fnmatch.fnmatch(name, pattern) for pattern in patterns):
                found.append(os.path.join(root, name))
    logger.info("Found %d candidate build config files", len(found))
    return sorted(found)


def extract_exposures_from_config(
    config_path: str,
    context: AnalysisContext,
    result: ExtractionResult,
) -> bool:
    """Scan one build config file; returns True when an exposure map was found."""
    try:
        tree, _ = parse_file(config_path)
    except OSError as e:
        result.errors.append(f"Could not read exposures config: {config_path} ({e})")
        return False
    except ModuleParseError as e:
        result.errors.append(f"Parse error in {config_path}: {e}")
        return False

    obj = find_exposes_object(tree.root_node)
    mode = "exact"
    if obj is None:
        obj = find_exposure_like_object(tree.root_node)
        mode = "heuristic"
    if obj is None:
        logger.debug("No exposure map in %s", config_path)
        return False

    entries = read_exposure_entries(obj)
    logger.info("Found %d exposures in %s (%s match)", len(entries), config_path, mode)
    record_exposures(entries, os.path.dirname(config_path), context, result)
    return True


def find_exposures(
    context: AnalysisContext,
    exposures_override: Optional[Mapping[str, object]] = None,
    exposures_config_path: Optional[str] = None,
) -> ExtractionResult:
    """Locate the package's exposure map.

    Explicit mode applies only when an override is given without a config
    path; otherwise config files are scanned (the forced one, or every
    candidate until one yields a map).
    """
    result = ExtractionResult()
    package_root = context.package_root

    if exposures_override is not None and not exposures_config_path:
        logger.info("Using explicit exposures mapping with %d entries", len(exposures_override))
        entries = [
            (str(name), target if isinstance(target, str) else None)
            for name, target in exposures_override.items()
        ]
        record_exposures(entries, package_root, context, result)
        return result

    if exposures_override is not None:
        logger.warning("Both an exposures mapping and a config path were given; scanning the config")

    if exposures_config_path:
        candidates = [os.path.abspath(os.path.join(package_root, exposures_config_path))]
    else:
        candidates = discover_config_files(
            package_root,
            context.config.exposure_config_patterns,
            context.config.ignored_dirs,
        )

    for candidate in candidates:
        if extract_exposures_from_config(candidate, context, result):
            break
    return result
