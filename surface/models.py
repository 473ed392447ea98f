"""
Data models for extracted exports and per-module extraction results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class ExportCategory(str, Enum):
    """Report bucket an exported name belongs to."""

    VALUE = "value"
    TYPE = "type"
    EXPOSURE = "exposure"


@dataclass(frozen=True)
class ExportRecord:
    """A single exported name as seen by one extractor.

    Attributes:
        name: Exported name (``default`` for default exports).
        category: Value, Type or Exposure bucket.
        documented: Whether a valid documentation comment was found.
    """

    name: str
    category: ExportCategory
    documented: bool = False


@dataclass
class ExtractionResult:
    """Everything one extractor learned about one module (or config file).

    Attributes:
        records: Exported names found in the module.
        discovered: Existing module files newly reachable from the module.
        re_exports: Non-relative module specifiers re-exported by the module.
        external_names: Names whose declarations live outside the package.
        errors: Non-fatal diagnostics.
    """

    records: List[ExportRecord] = field(default_factory=list)
    discovered: List[str] = field(default_factory=list)
    re_exports: List[str] = field(default_factory=list)
    external_names: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add(self, name: str, category: ExportCategory, documented: bool) -> None:
        self.records.append(ExportRecord(name=name, category=category, documented=documented))
