"""Per-run analysis context handed to every extractor call."""

from dataclasses import dataclass, field
from typing import Optional

from core.analyzer_config import AnalyzerConfig
from surface.resolver import ModuleResolver
from surface.type_checker import DeclarationChecker


@dataclass
class AnalysisContext:
    """Read-only collaborators shared by the extractors of one run.

    Attributes:
        package_root: Absolute root directory of the analyzed package.
        config: Analyzer configuration.
        resolver: Relative specifier resolver (suffix order from config).
        checker: Declaration checker for typed modules, created on demand.
    """

    package_root: str
    config: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    resolver: Optional[ModuleResolver] = None
    checker: Optional[DeclarationChecker] = None

    def __post_init__(self) -> None:
        if self.resolver is None:
            self.resolver = ModuleResolver(self.config.resolve_suffixes)
        if self.checker is None:
            self.checker = DeclarationChecker(
                package_root=self.package_root,
                config=self.config,
            )
