"""Package manifest contract: ``package.json`` loading and entry-point discovery."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Iterable

from core.analyzer_config import AnalyzerConfig

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"

# Conditions that point at runtime code inside an ``exports`` object.
_VALUE_CONDITIONS: tuple[str, ...] = ("import", "require", "node", "default", "module", "browser")
_TYPE_CONDITIONS: tuple[str, ...] = ("types", "typings")

_DECLARATION_SIBLINGS: tuple[tuple[str, str], ...] = (
    (".mjs", ".d.mts"),
    (".cjs", ".d.cts"),
    (".js", ".d.ts"),
)


@dataclass(frozen=True)
class PackageManifest:
    """Parsed ``package.json`` of the analyzed package."""

    root: str
    name: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EntryFileSet:
    """Existing entry files, split by the extraction strategy they need."""

    value_entries: tuple[str, ...] = ()
    typed_entries: tuple[str, ...] = ()

    def all_entries(self) -> list[str]:
        return [*self.value_entries, *self.typed_entries]

    def is_empty(self) -> bool:
        return not self.value_entries and not self.typed_entries

    def to_dict(self) -> dict[str, list[str]]:
        return {"value": list(self.value_entries), "typed": list(self.typed_entries)}


def load_package_manifest(package_root: str) -> PackageManifest:
    """Load ``package.json`` from ``package_root``.

    Raises:
        FileNotFoundError: If the root directory or the manifest is missing.
        ValueError: If the manifest is not a JSON object.
    """
    root = os.path.abspath(package_root)
    if not os.path.isdir(root):
        raise FileNotFoundError(f"Package directory not found: {root}")

    manifest_path = os.path.join(root, MANIFEST_FILENAME)
    if not os.path.isfile(manifest_path):
        raise FileNotFoundError(f"{MANIFEST_FILENAME} not found at {manifest_path}")

    with open(manifest_path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"{manifest_path} must contain a JSON object")

    name = str(payload.get("name") or "").strip() or os.path.basename(root)
    return PackageManifest(root=root, name=name, payload=payload)


def _collect_export_targets(
    node: Any,
    condition: str | None,
    typed: list[str],
    untyped: list[str],
) -> None:
    """Walk an ``exports`` value (string, array or condition object)."""
    if isinstance(node, str):
        if "*" in node:
            logger.debug("Skipping wildcard export target %s", node)
            return
        if condition in _TYPE_CONDITIONS:
            typed.append(node)
        else:
            untyped.append(node)
    elif isinstance(node, list):
        for item in node:
            _collect_export_targets(item, condition, typed, untyped)
    elif isinstance(node, dict):
        for key, value in node.items():
            if key.startswith("."):
                # Subpath key, e.g. "./feature": the condition resets.
                _collect_export_targets(value, None, typed, untyped)
            elif key in _TYPE_CONDITIONS or key in _VALUE_CONDITIONS:
                _collect_export_targets(value, key, typed, untyped)
            else:
                # Custom conditions ("development", "worker", ...) still lead to files.
                _collect_export_targets(value, condition, typed, untyped)


def _unique_existing(paths: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        if os.path.isfile(path):
            result.append(path)
        else:
            logger.debug("Entry point does not exist: %s", path)
    return result


def find_entry_points(manifest: PackageManifest, config: AnalyzerConfig) -> EntryFileSet:
    """Derive value and typed entry files from the manifest.

    ``types``/``typings`` are typed entries, ``main``/``module`` are value
    entries and every ``exports`` target is classified by its suffix (or by
    its ``types`` condition). Missing files are dropped, and a path found in
    both sets stays only in the typed set.
    """
    payload = manifest.payload
    root = manifest.root
    typed: list[str] = []
    value: list[str] = []

    for key in ("types", "typings"):
        if isinstance(payload.get(key), str):
            typed.append(payload[key])
    for key in ("main", "module"):
        if isinstance(payload.get(key), str):
            value.append(payload[key])

    exports = payload.get("exports")
    if exports is not None:
        export_typed: list[str] = []
        export_untyped: list[str] = []
        _collect_export_targets(exports, None, export_typed, export_untyped)
        typed.extend(export_typed)
        for target in export_untyped:
            if config.is_typed_path(target):
                typed.append(target)
            elif config.is_value_path(target):
                value.append(target)
            else:
                logger.debug("Ignoring export target with unknown suffix: %s", target)

    typed_paths = _unique_existing(os.path.normpath(os.path.join(root, p)) for p in typed)
    value_paths = _unique_existing(os.path.normpath(os.path.join(root, p)) for p in value)

    if not typed_paths and value_paths:
        first = value_paths[0]
        for js_suffix, dts_suffix in _DECLARATION_SIBLINGS:
            if first.endswith(js_suffix):
                sibling = first[: -len(js_suffix)] + dts_suffix
                if os.path.isfile(sibling):
                    logger.info("Using sibling declaration file %s", sibling)
                    typed_paths.append(sibling)
                break

    typed_set = set(typed_paths)
    value_paths = [p for p in value_paths if p not in typed_set]

    entries = EntryFileSet(value_entries=tuple(value_paths), typed_entries=tuple(typed_paths))
    logger.info(
        "Found %d value and %d typed entry points",
        len(entries.value_entries),
        len(entries.typed_entries),
    )
    return entries
