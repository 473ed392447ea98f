"""
Report aggregation: order-stable deduplication and derived counts.

A name seen once documented and once undocumented in the same bucket ends up
documented only.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from surface.models import ExportCategory, ExportRecord, ExtractionResult


def unique_in_order(names: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping first occurrences in order."""
    return list(dict.fromkeys(names))


@dataclass(frozen=True)
class CategorySummary:
    """Final lists of one bucket; counts are derived from the lists."""

    names: List[str] = field(default_factory=list)
    documented_names: List[str] = field(default_factory=list)
    undocumented_names: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.names)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "documented": len(self.documented_names),
            "undocumented": len(self.undocumented_names),
            "list": list(self.names),
            "documented_list": list(self.documented_names),
            "undocumented_list": list(self.undocumented_names),
        }


@dataclass
class CategoryBucket:
    """Raw sightings of one bucket, as pushed by extractors."""

    names: List[str] = field(default_factory=list)
    documented: List[str] = field(default_factory=list)
    undocumented: List[str] = field(default_factory=list)

    def add(self, name: str, documented: bool) -> None:
        self.names.append(name)
        (self.documented if documented else self.undocumented).append(name)

    def summarize(self) -> CategorySummary:
        documented = unique_in_order(self.documented)
        documented_set = set(documented)
        undocumented = [n for n in unique_in_order(self.undocumented) if n not in documented_set]
        return CategorySummary(
            names=unique_in_order(self.names),
            documented_names=documented,
            undocumented_names=undocumented,
        )


@dataclass
class Report:
    """The API surface report of one package."""

    package_name: str
    package_path: str
    run_id: str
    generated_at: str
    value: CategorySummary
    type: CategorySummary
    exposure: CategorySummary
    re_exports: List[str]
    externally_originated: List[str]
    entry_points: Dict[str, List[str]]
    processed_files: List[str]
    errors: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package_name": self.package_name,
            "package_path": self.package_path,
            "run_id": self.run_id,
            "generated_at": self.generated_at,
            "value": self.value.to_dict(),
            "type": self.type.to_dict(),
            "exposure": self.exposure.to_dict(),
            "re_exports": list(self.re_exports),
            "externally_originated": list(self.externally_originated),
            "entry_points": {k: list(v) for k, v in self.entry_points.items()},
            "processed_files": list(self.processed_files),
            "errors": list(self.errors),
        }


class ReportBuilder:
    """Accumulates extraction results during one run."""

    def __init__(self, package_name: str, package_path: str):
        self.package_name = package_name
        self.package_path = package_path
        self.buckets: Dict[ExportCategory, CategoryBucket] = {
            category: CategoryBucket() for category in ExportCategory
        }
        self.re_exports: List[str] = []
        self.external_names: List[str] = []
        self.entry_points: Dict[str, List[str]] = {"value": [], "typed": []}
        self.processed_files: List[str] = []
        self.errors: List[str] = []

    def add_record(self, record: ExportRecord) -> None:
        self.buckets[record.category].add(record.name, record.documented)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def mark_processed(self, file_path: str) -> None:
        self.processed_files.append(file_path)

    def set_entry_points(self, entry_points: Dict[str, List[str]]) -> None:
        self.entry_points = {k: list(v) for k, v in entry_points.items()}

    def merge(self, result: ExtractionResult) -> None:
        """Fold one extractor result in (discovered modules are the walker's job)."""
        for record in result.records:
            self.add_record(record)
        self.re_exports.extend(result.re_exports)
        self.external_names.extend(result.external_names)
        self.errors.extend(result.errors)

    def build(self, run_id: str = "-", generated_at: Optional[str] = None) -> Report:
        return Report(
            package_name=self.package_name,
            package_path=self.package_path,
            run_id=run_id,
            generated_at=generated_at or datetime.now().isoformat(timespec="seconds"),
            value=self.buckets[ExportCategory.VALUE].summarize(),
            type=self.buckets[ExportCategory.TYPE].summarize(),
            exposure=self.buckets[ExportCategory.EXPOSURE].summarize(),
            re_exports=unique_in_order(self.re_exports),
            externally_originated=unique_in_order(self.external_names),
            entry_points=self.entry_points,
            processed_files=sorted(self.processed_files),
            errors=list(self.errors),
        )
