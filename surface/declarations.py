"""
Helpers reading names out of declaration and export nodes.

Shared by the syntax extractor (value dialect) and the declaration checker
(typed dialect). Both grammars use the same node and field names for the
constructs handled here.
"""

import logging
from typing import List, Optional, Tuple

from tree_sitter import Node

from surface.config import (
    AMBIENT_DECLARATION,
    NAMED_DECLARATIONS,
    NAMESPACE_DECLARATIONS,
    OBJECT_PATTERN_NAME,
    PATTERN_CHILD_FIELDS,
    STRING_NODE,
    UNKNOWN_BINDING_NAME,
    VARIABLE_DECLARATIONS,
)
from surface.parser import has_token, node_text, string_value

logger = logging.getLogger(__name__)


def unwrap_declaration(node: Node) -> Optional[Node]:
    """Return the declaration inside ``declare ...`` or a namespace statement.

    ``declare global {}`` and ``declare module "x" {}`` have no exportable
    declaration and yield None.
    """
    if node.type == AMBIENT_DECLARATION:
        for child in node.named_children:
            inner = unwrap_declaration(child)
            if inner is not None:
                return inner
        return None
    if node.type == "expression_statement":
        for child in node.named_children:
            if child.type in NAMESPACE_DECLARATIONS:
                return child
        return None
    if node.type in NAMED_DECLARATIONS or node.type in VARIABLE_DECLARATIONS:
        return node
    if node.type in NAMESPACE_DECLARATIONS:
        name = node.child_by_field_name("name")
        if name is not None and name.type == STRING_NODE:
            return None
        return node
    return None


def declaration_name(node: Node) -> Optional[str]:
    """Name of a single-name declaration (function, class, interface, namespace, ...).

    For dotted namespaces (``namespace A.B {}``) the outermost name is returned.
    """
    name = node.child_by_field_name("name")
    if name is None:
        return None
    if name.type == "nested_identifier":
        return node_text(name).split(".", 1)[0].strip()
    return node_text(name)


def pattern_binding_names(pattern: Node) -> List[str]:
    """Every identifier bound by a destructuring pattern."""
    if pattern.type in ("identifier", "shorthand_property_identifier_pattern"):
        return [node_text(pattern)]
    field_name = PATTERN_CHILD_FIELDS.get(pattern.type)
    if field_name is not None:
        target = pattern.child_by_field_name(field_name)
        return pattern_binding_names(target) if target is not None else []
    names: List[str] = []
    if pattern.type in ("object_pattern", "array_pattern", "rest_pattern"):
        for child in pattern.named_children:
            names.extend(pattern_binding_names(child))
    return names


def variable_binding_names(node: Node, expand_patterns: bool = False) -> List[str]:
    """Names bound by a ``const``/``let``/``var`` statement.

    Without ``expand_patterns`` an object destructuring target becomes the
    ``[ObjectPattern]`` placeholder and any other pattern ``unknown``.
    """
    names: List[str] = []
    for declarator in node.named_children:
        if declarator.type != "variable_declarator":
            continue
        target = declarator.child_by_field_name("name")
        if target is None:
            names.append(UNKNOWN_BINDING_NAME)
        elif target.type == "identifier":
            names.append(node_text(target))
        elif expand_patterns:
            names.extend(pattern_binding_names(target))
        elif target.type == "object_pattern":
            names.append(OBJECT_PATTERN_NAME)
        else:
            names.append(UNKNOWN_BINDING_NAME)
    return names


def declaration_binding_names(node: Node, expand_patterns: bool = False) -> List[str]:
    """Names a declaration introduces into module scope."""
    if node.type in VARIABLE_DECLARATIONS:
        return variable_binding_names(node, expand_patterns=expand_patterns)
    inner = unwrap_declaration(node)
    if inner is not None and inner is not node:
        return declaration_binding_names(inner, expand_patterns=expand_patterns)
    name = declaration_name(node)
    return [name] if name else [UNKNOWN_BINDING_NAME]


def _module_export_name(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    if node.type == STRING_NODE:
        return string_value(node)
    return node_text(node)


def export_specifier_names(specifier: Node) -> Tuple[str, str]:
    """Return ``(local_name, exported_name)`` of an ``export_specifier``."""
    local = _module_export_name(specifier.child_by_field_name("name")) or UNKNOWN_BINDING_NAME
    exported = _module_export_name(specifier.child_by_field_name("alias")) or local
    return local, exported


def namespace_export_name(node: Node) -> str:
    """Name bound by ``* as ns`` in an export statement."""
    named = node.named_children
    if not named:
        return UNKNOWN_BINDING_NAME
    return _module_export_name(named[-1]) or UNKNOWN_BINDING_NAME


def is_type_only_specifier(specifier: Node) -> bool:
    """``export { type A }`` marks a single specifier type-only."""
    return has_token(specifier, "type")
