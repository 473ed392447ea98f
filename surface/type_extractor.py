"""
Type-aware export extraction for typed-dialect (TypeScript / ``.d.ts``) modules.

Every export of the module's symbol table is classified along three axes:

- category: Value and/or Type, with type-only exports never producing a Value,
- documentation: aggregated JSDoc of the (aliased) symbol,
- origin: declared inside the package, or inherited from a dependency.

Blanket relative re-exports (``export * from './x'``) additionally become
newly discovered modules.
"""

import logging
import os
from typing import List

from tree_sitter import Node

from surface.config import (
    EXPORT_CLAUSE,
    EXPORT_STATEMENT,
    INTERNAL_NAME_PREFIX,
    NAMESPACE_EXPORT,
)
from surface.context import AnalysisContext
from surface.models import ExportCategory, ExtractionResult
from surface.parser import ModuleParseError, has_token, string_value
from surface.resolver import is_relative_specifier
from surface.syntax_extractor import resolve_relative_targets
from surface.type_checker import CheckerSymbol, DeclarationChecker

logger = logging.getLogger(__name__)


def collect_blanket_reexports(root: Node, result: ExtractionResult) -> List[str]:
    """Scan top-level ``export * from X`` statements (no clause).

    Relative targets are returned for resolution; bare ones are recorded as
    re-exported packages.
    """
    relative: List[str] = []
    for statement in root.named_children:
        if statement.type != EXPORT_STATEMENT or not has_token(statement, "*"):
            continue
        if any(child.type in (EXPORT_CLAUSE, NAMESPACE_EXPORT) for child in statement.named_children):
            continue
        source = statement.child_by_field_name("source")
        if source is None:
            continue
        specifier = string_value(source)
        if is_relative_specifier(specifier):
            relative.append(specifier)
        else:
            result.re_exports.append(specifier)
    return relative


def classify_symbol(
    symbol: CheckerSymbol,
    checker: DeclarationChecker,
    file_path: str,
    result: ExtractionResult,
) -> None:
    """Emit Value/Type records (and origin) for one exported symbol."""
    target = checker.get_aliased_symbol(symbol) if symbol.is_alias else symbol
    if target is None:
        result.errors.append(f"Could not resolve export '{symbol.name}' in {file_path}")
        target = symbol

    if target is symbol and symbol.is_alias:
        # Unresolved re-export from a bare specifier: a dependency's symbol.
        external = symbol.alias_specifier is not None and not is_relative_specifier(symbol.alias_specifier)
    else:
        external = checker.is_external_symbol(target)
    if external:
        result.external_names.append(symbol.name)

    type_only = checker.is_type_only_export(symbol)
    documented = checker.get_documentation_comment(target).is_valid()

    if not type_only and target.has_value_facet:
        result.add(symbol.name, ExportCategory.VALUE, documented)
    if type_only or target.has_type_facet:
        result.add(symbol.name, ExportCategory.TYPE, documented)


def extract_typed_module(file_path: str, context: AnalysisContext) -> ExtractionResult:
    """Extract exports of a typed-dialect module.

    Args:
        file_path: Absolute path of the module.
        context: Run context (checker, resolver, configuration).

    Returns:
        ExtractionResult with Value/Type records, external names, re-exports
        and discovered modules.
    """
    result = ExtractionResult()
    checker = context.checker
    try:
        module = checker.get_module_symbol(file_path)
    except OSError as e:
        result.errors.append(f"Could not read typed module: {file_path} ({e})")
        return result
    except ModuleParseError as e:
        result.errors.append(f"Parse error in {file_path}: {e}")
        return result

    if module is None:
        result.errors.append(f"Could not find module symbol for: {file_path}")
        return result

    for symbol in checker.get_exports_of_module(module):
        if symbol.name.startswith(INTERNAL_NAME_PREFIX):
            continue
        classify_symbol(symbol, checker, file_path, result)

    relative = collect_blanket_reexports(module.root, result)
    resolve_relative_targets(file_path, relative, context, result)

    logger.info(
        "Classified %d export records in %s (%d external, %d modules discovered)",
        len(result.records),
        os.path.basename(file_path),
        len(result.external_names),
        len(result.discovered),
    )
    return result
