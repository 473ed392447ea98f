"""
API surface engine.

Tree-sitter based extraction of the exports a JavaScript / TypeScript package
exposes, classified as runtime values, type-only declarations or federated
module exposures.
"""

from surface.models import ExportCategory, ExportRecord, ExtractionResult
from surface.parser import create_parser, parse_bytes, parse_file, count_error_nodes
from surface.resolver import ModuleResolver, is_relative_specifier
from surface.jsdoc import DocComment, has_valid_doc, parse_doc_comment
from surface.type_checker import DeclarationChecker
from surface.context import AnalysisContext
from surface.exposures import find_exposures, is_exposure_like
from surface.syntax_extractor import extract_value_module
from surface.type_extractor import extract_typed_module
from surface.report import CategorySummary, Report, ReportBuilder
from surface.walker import GraphWalker, select_extractor
from surface.analyzer import analyze_package

__all__ = [
    # Data models
    "ExportCategory",
    "ExportRecord",
    "ExtractionResult",
    "CategorySummary",
    "Report",
    # Low-level parsing
    "create_parser",
    "parse_bytes",
    "parse_file",
    "count_error_nodes",
    "DocComment",
    "has_valid_doc",
    "parse_doc_comment",
    # Resolution and symbol tables
    "ModuleResolver",
    "is_relative_specifier",
    "DeclarationChecker",
    "AnalysisContext",
    # Extractors
    "find_exposures",
    "is_exposure_like",
    "extract_value_module",
    "extract_typed_module",
    # Orchestration
    "ReportBuilder",
    "GraphWalker",
    "select_extractor",
    "analyze_package",
]
