"""
Syntax-only export extraction for value-dialect (JavaScript) modules.

This module walks the top-level statements of a module once, records every
exported name as a Value record (documented or not), remembers relative
re-export targets and finally resolves them into newly discovered modules.
"""

import logging
import os
from typing import List

from tree_sitter import Node

from surface.config import (
    DEFAULT_EXPORT_NAME,
    EXPORT_CLAUSE,
    EXPORT_SPECIFIER,
    EXPORT_STATEMENT,
    NAMESPACE_EXPORT,
    OBJECT_NODE,
    PAIR_NODE,
    SHORTHAND_PROPERTY,
    STRING_NODE,
)
from surface.context import AnalysisContext
from surface.declarations import (
    declaration_binding_names,
    export_specifier_names,
    namespace_export_name,
)
from surface.jsdoc import is_node_documented
from surface.models import ExportCategory, ExtractionResult
from surface.parser import ModuleParseError, has_token, node_text, parse_file, string_value
from surface.resolver import is_relative_specifier

logger = logging.getLogger(__name__)

# tsc/babel CommonJS helpers that re-export a required module wholesale
_EXPORT_STAR_HELPERS = ("__exportStar", "__export", "_exportStar")


def _record_source(node: Node, result: ExtractionResult, relative: List[str]) -> None:
    """Route an export source to the resolution queue or the re-export registry."""
    source = node.child_by_field_name("source")
    if source is None:
        return
    specifier = string_value(source)
    if is_relative_specifier(specifier):
        relative.append(specifier)
    else:
        result.re_exports.append(specifier)


def collect_export_statement(node: Node, result: ExtractionResult, relative: List[str]) -> None:
    """Record the names exported by one ``export ...`` statement.

    Args:
        node: An ``export_statement`` node.
        result: Accumulator for records and re-export specifiers.
        relative: Accumulator for relative specifiers to resolve later.
    """
    documented = is_node_documented(node)
    _record_source(node, result, relative)

    if has_token(node, "default"):
        result.add(DEFAULT_EXPORT_NAME, ExportCategory.VALUE, documented)
        return

    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        for name in declaration_binding_names(declaration):
            result.add(name, ExportCategory.VALUE, documented)
        return

    for child in node.named_children:
        if child.type == EXPORT_CLAUSE:
            for specifier in child.named_children:
                if specifier.type == EXPORT_SPECIFIER:
                    _, exported = export_specifier_names(specifier)
                    result.add(exported, ExportCategory.VALUE, documented)
        elif child.type == NAMESPACE_EXPORT:
            result.add(namespace_export_name(child), ExportCategory.VALUE, documented)


def _require_specifier(node: Node) -> str:
    """Return the string argument of ``require('x')``, or an empty string."""
    if node.type != "call_expression":
        return ""
    function = node.child_by_field_name("function")
    if function is None or node_text(function) != "require":
        return ""
    arguments = node.child_by_field_name("arguments")
    if arguments is None:
        return ""
    for arg in arguments.named_children:
        if arg.type == STRING_NODE:
            return string_value(arg)
    return ""


def _commonjs_export_name(left: Node) -> str:
    """Classify an assignment target.

    Returns the exported name for ``exports.X`` / ``module.exports.X``,
    ``module.exports`` for a whole-object assignment, or an empty string.
    """
    if left.type != "member_expression":
        return ""
    obj = left.child_by_field_name("object")
    prop = left.child_by_field_name("property")
    if obj is None or prop is None:
        return ""
    obj_text = node_text(obj)
    if obj_text == "module" and node_text(prop) == "exports":
        return "module.exports"
    if obj_text in ("exports", "module.exports"):
        return node_text(prop)
    return ""


def _record_module_exports_value(value: Node, documented: bool, result: ExtractionResult, relative: List[str]) -> None:
    specifier = _require_specifier(value)
    if specifier:
        if is_relative_specifier(specifier):
            relative.append(specifier)
        else:
            result.re_exports.append(specifier)
        return

    if value.type == OBJECT_NODE:
        for prop in value.named_children:
            if prop.type == PAIR_NODE:
                key = prop.child_by_field_name("key")
                if key is not None:
                    name = string_value(key) if key.type == STRING_NODE else node_text(key)
                    result.add(name, ExportCategory.VALUE, documented)
            elif prop.type == SHORTHAND_PROPERTY:
                result.add(node_text(prop), ExportCategory.VALUE, documented)
            elif prop.type == "method_definition":
                name_node = prop.child_by_field_name("name")
                if name_node is not None:
                    result.add(node_text(name_node), ExportCategory.VALUE, documented)
        return

    result.add(DEFAULT_EXPORT_NAME, ExportCategory.VALUE, documented)


def collect_commonjs_statement(node: Node, result: ExtractionResult, relative: List[str]) -> None:
    """Record CommonJS exports from one ``expression_statement``."""
    expression = node.named_children[0] if node.named_children else None
    if expression is None:
        return

    if expression.type == "call_expression":
        function = expression.child_by_field_name("function")
        if function is not None and node_text(function).endswith(_EXPORT_STAR_HELPERS):
            arguments = expression.child_by_field_name("arguments")
            for arg in arguments.named_children if arguments is not None else []:
                specifier = _require_specifier(arg)
                if specifier:
                    if is_relative_specifier(specifier):
                        relative.append(specifier)
                    else:
                        result.re_exports.append(specifier)
        return

    if expression.type != "assignment_expression":
        return

    documented = is_node_documented(node)
    # `exports.a = exports.b = void 0` assigns several names at once
    current = expression
    while current is not None and current.type == "assignment_expression":
        left = current.child_by_field_name("left")
        right = current.child_by_field_name("right")
        target = _commonjs_export_name(left) if left is not None else ""
        if target == "module.exports":
            if right is not None:
                _record_module_exports_value(right, documented, result, relative)
        elif target and not target.startswith("__"):
            result.add(target, ExportCategory.VALUE, documented)
        current = right


def collect_value_exports(root: Node, result: ExtractionResult, commonjs: bool = True) -> List[str]:
    """Walk top-level statements once, returning relative specifiers to resolve."""
    relative: List[str] = []
    for child in root.named_children:
        if child.type == EXPORT_STATEMENT:
            collect_export_statement(child, result, relative)
        elif commonjs and child.type == "expression_statement":
            collect_commonjs_statement(child, result, relative)
    return relative


def resolve_relative_targets(
    file_path: str,
    specifiers: List[str],
    context: AnalysisContext,
    result: ExtractionResult,
) -> None:
    """Resolve relative specifiers; hits become discovered modules."""
    base_dir = os.path.dirname(file_path)
    for specifier in dict.fromkeys(specifiers):
        resolved = context.resolver.resolve(base_dir, specifier)
        if resolved is None:
            result.errors.append(f"Could not resolve re-export '{specifier}' from {file_path}")
            continue
        result.discovered.append(resolved)


def extract_value_module(file_path: str, context: AnalysisContext) -> ExtractionResult:
    """Extract exports of a value-dialect module.

    Args:
        file_path: Absolute path of the module.
        context: Run context (resolver and configuration).

    Returns:
        ExtractionResult with Value records, re-exports and discovered modules.
    """
    result = ExtractionResult()
    try:
        tree, _ = parse_file(file_path)
    except OSError as e:
        result.errors.append(f"Could not read value module: {file_path} ({e})")
        return result
    except ModuleParseError as e:
        result.errors.append(f"Parse error in {file_path}: {e}")
        return result

    relative = collect_value_exports(
        tree.root_node, result, commonjs=context.config.commonjs_exports
    )
    resolve_relative_targets(file_path, relative, context, result)

    logger.info(
        "Extracted %d exports from %s (%d modules discovered)",
        len(result.records),
        file_path,
        len(result.discovered),
    )
    return result
