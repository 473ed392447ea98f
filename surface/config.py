"""
Configuration constants for JavaScript / TypeScript export extraction.

Defines the tree-sitter node type strings and sentinel names used by the
syntax and type extractors.
"""

from typing import Dict, FrozenSet, Set

# Statement carrying every ES module export form
EXPORT_STATEMENT: str = "export_statement"

# Statement carrying every ES module import form
IMPORT_STATEMENT: str = "import_statement"

# Comment node type (includes //, /* */, /** */)
COMMENT_NODE: str = "comment"

# `{ a, b as c }` inside an export statement
EXPORT_CLAUSE: str = "export_clause"
EXPORT_SPECIFIER: str = "export_specifier"

# `* as ns` inside an export statement
NAMESPACE_EXPORT: str = "namespace_export"

# Declarations introducing exactly one name through the `name` field
NAMED_DECLARATIONS: Set[str] = {
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
    "abstract_class_declaration",
    "function_signature",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
}

# Declarations binding one name per `variable_declarator`
VARIABLE_DECLARATIONS: Set[str] = {
    "lexical_declaration",
    "variable_declaration",
}

# TypeScript namespaces (`namespace A {}` / `module A {}`)
NAMESPACE_DECLARATIONS: Set[str] = {
    "internal_module",
    "module",
}

# `declare ...` wrapper in declaration files
AMBIENT_DECLARATION: str = "ambient_declaration"

# Documentation comment marker: `/**`
DOC_COMMENT_PREFIX: str = "/**"

# Sentinel names for bindings that have no single identifier
OBJECT_PATTERN_NAME: str = "[ObjectPattern]"
UNKNOWN_BINDING_NAME: str = "unknown"
DEFAULT_EXPORT_NAME: str = "default"

# Exports starting with this prefix are synthetic / internal bindings
INTERNAL_NAME_PREFIX: str = "__"

# Exposure map key and the prefix of public exposure aliases
EXPOSES_KEY: str = "exposes"
EXPOSURE_KEY_PREFIX: str = "./"

# Object literal shapes
OBJECT_NODE: str = "object"
PAIR_NODE: str = "pair"
SHORTHAND_PROPERTY: str = "shorthand_property_identifier"
IDENTIFIER_KEY_TYPES: FrozenSet[str] = frozenset({"property_identifier", "identifier"})
STRING_NODE: str = "string"

# Grammar selection by file suffix (anything else uses JavaScript)
TSX_SUFFIXES: tuple = (".tsx",)
TYPESCRIPT_SUFFIXES: tuple = (".ts", ".mts", ".cts")

# Binding pattern node types (for destructured exports)
PATTERN_CHILD_FIELDS: Dict[str, str] = {
    "pair_pattern": "value",
    "assignment_pattern": "left",
    "object_assignment_pattern": "left",
}
