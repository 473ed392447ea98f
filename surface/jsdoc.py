"""
JSDoc comment parsing and documentation validity checks.

A comment documents a declaration only if it is a ``/** ... */`` block that
yields a non-empty description or at least one ``@tag``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from tree_sitter import Node

from surface.config import COMMENT_NODE, DOC_COMMENT_PREFIX
from surface.parser import node_text

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"^@([A-Za-z_][\w-]*)\s*(.*)$")


@dataclass
class DocTag:
    """A single ``@title body`` tag."""

    title: str
    body: str = ""


@dataclass
class DocComment:
    """Structured documentation parsed from a comment block."""

    description: str = ""
    tags: List[DocTag] = field(default_factory=list)

    def is_valid(self) -> bool:
        return bool(self.description.strip()) or len(self.tags) > 0

    def merge(self, other: "DocComment") -> "DocComment":
        parts = [p for p in (self.description.strip(), other.description.strip()) if p]
        return DocComment(description="\n".join(parts), tags=self.tags + other.tags)


def is_doc_comment(comment_text: str) -> bool:
    """Check if a comment is a JSDoc block (``/**`` but not the empty ``/**/``)."""
    stripped = comment_text.strip()
    return (
        stripped.startswith(DOC_COMMENT_PREFIX)
        and stripped.endswith("*/")
        and len(stripped) > len("/**/")
    )


def clean_doc_comment(comment_text: str) -> List[str]:
    """Strip ``/**``, ``*/`` and leading asterisks, keeping line structure."""
    text = comment_text.strip()
    if text.startswith(DOC_COMMENT_PREFIX):
        text = text[len(DOC_COMMENT_PREFIX):]
    if text.endswith("*/"):
        text = text[:-2]

    lines = []
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            if stripped.startswith(" "):
                stripped = stripped[1:]
        lines.append(stripped.rstrip())
    return lines


def parse_doc_comment(comment_text: str) -> DocComment:
    """Parse a JSDoc block into description and tags.

    The description is everything before the first line starting with
    ``@name``; every tag continues until the next tag line.
    """
    description: List[str] = []
    tags: List[DocTag] = []

    for line in clean_doc_comment(comment_text):
        match = _TAG_RE.match(line)
        if match:
            tags.append(DocTag(title=match.group(1), body=match.group(2).strip()))
        elif tags:
            if line:
                tags[-1].body = f"{tags[-1].body}\n{line}".strip()
        else:
            description.append(line)

    return DocComment(description="\n".join(description).strip(), tags=tags)


def has_valid_doc(comment_text: Optional[str]) -> bool:
    """Documentation validity rule shared by both extractors."""
    if not comment_text or not is_doc_comment(comment_text):
        return False
    return parse_doc_comment(comment_text).is_valid()


def get_preceding_doc_comment(node: Node) -> Optional[str]:
    """Return the text of the comment immediately preceding ``node``.

    Only the closest comment counts, matching how leading comments attach
    to a statement; it is returned only when it is a JSDoc block.
    """
    sibling = node.prev_sibling
    if sibling is None or sibling.type != COMMENT_NODE:
        return None
    text = node_text(sibling)
    if not is_doc_comment(text):
        return None
    return text


def is_node_documented(node: Node) -> bool:
    return has_valid_doc(get_preceding_doc_comment(node))
