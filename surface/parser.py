"""
Tree-sitter parser initialization and module parsing utilities.

This module selects the JavaScript, TypeScript or TSX grammar for a module
path and parses source files into syntax trees.
"""

import logging
from typing import Iterator, Optional, Tuple

import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser, Tree

from surface.config import STRING_NODE, TSX_SUFFIXES, TYPESCRIPT_SUFFIXES

logger = logging.getLogger(__name__)

# Module-level language constants
JAVASCRIPT_LANGUAGE = Language(tsjs.language())
TYPESCRIPT_LANGUAGE = Language(tsts.language_typescript())
TSX_LANGUAGE = Language(tsts.language_tsx())


class ModuleParseError(ValueError):
    """Raised when a module cannot be turned into a usable syntax tree."""


def language_for_path(file_path: str) -> Language:
    """Pick the grammar for a module path.

    ``.tsx`` uses the TSX grammar, ``.ts``/``.mts``/``.cts`` (declaration
    files included) use TypeScript, everything else JavaScript with JSX.
    """
    if file_path.endswith(TSX_SUFFIXES):
        return TSX_LANGUAGE
    if file_path.endswith(TYPESCRIPT_SUFFIXES):
        return TYPESCRIPT_LANGUAGE
    return JAVASCRIPT_LANGUAGE


def create_parser(language: Language = JAVASCRIPT_LANGUAGE) -> Parser:
    """Create a tree-sitter parser for one grammar.

    Example:
        >>> parser = create_parser(TYPESCRIPT_LANGUAGE)
        >>> tree = parser.parse(b"export const a = 1;")
    """
    parser = Parser(language)
    logger.debug("Created tree-sitter parser for %s", language)
    return parser


def parse_bytes(source: bytes, file_path: str = "module.js") -> Tree:
    """Parse raw module source using the grammar implied by ``file_path``.

    Raises:
        TypeError: If source is not bytes.
        ModuleParseError: If the whole module failed to parse.

    Example:
        >>> tree = parse_bytes(b"export default 1;")
        >>> tree.root_node.type
        'program'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    tree = create_parser(language_for_path(file_path)).parse(source)
    root = tree.root_node

    if root.has_error:
        if root.type == "ERROR" or (
            source.strip() and all(child.type == "ERROR" for child in root.children)
        ):
            raise ModuleParseError(f"Unable to parse {file_path}")
        logger.warning("%s contains syntax errors (%d error nodes)", file_path, count_error_nodes(tree))

    logger.debug("Parsed %d bytes of %s", len(source), file_path)
    return tree


def parse_file(file_path: str) -> Tuple[Tree, bytes]:
    """Parse a JavaScript/TypeScript module from disk.

    Returns:
        A tuple of (Tree, source_bytes).

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: If the file cannot be read.
        ModuleParseError: If the module could not be parsed.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error("File not found: %s", file_path)
        raise
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e)
        raise

    tree = parse_bytes(source_bytes, file_path)
    logger.debug("Successfully parsed file: %s", file_path)
    return tree, source_bytes


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and MISSING nodes in a tree."""
    return sum(1 for node in iter_nodes(tree.root_node) if node.type == "ERROR" or node.is_missing)


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node below ``root`` (inclusive) in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def string_value(node: Node) -> str:
    """Return the unquoted contents of a string literal node."""
    if node.type != STRING_NODE:
        return node_text(node)
    fragments = [node_text(child) for child in node.named_children]
    if fragments:
        return "".join(fragments)
    return node_text(node)[1:-1]


def has_token(node: Node, token: str) -> bool:
    """Check whether ``node`` has a direct anonymous child ``token`` (e.g. ``default``)."""
    return any(not child.is_named and child.type == token for child in node.children)
