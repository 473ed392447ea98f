"""
Unit tests for walker.py

Tests extractor selection, at-most-once analysis of every module and error
isolation during traversal.
"""

import tempfile
import unittest
from pathlib import Path
from typing import Dict
from unittest import mock

from core.analyzer_config import AnalyzerConfig
from surface.context import AnalysisContext
from surface.report import ReportBuilder
from surface.syntax_extractor import extract_value_module
from surface.type_extractor import extract_typed_module
from surface.walker import GraphWalker, select_extractor


class TestSelectExtractor(unittest.TestCase):
    def setUp(self):
        self.config = AnalyzerConfig()

    def test_declaration_file_is_typed(self):
        self.assertIs(select_extractor("/p/index.d.ts", self.config), extract_typed_module)

    def test_typescript_source_is_typed(self):
        self.assertIs(select_extractor("/p/App.tsx", self.config), extract_typed_module)

    def test_javascript_is_value(self):
        self.assertIs(select_extractor("/p/index.cjs", self.config), extract_value_module)

    def test_unknown_suffix(self):
        self.assertIsNone(select_extractor("/p/data.json", self.config))


class TestGraphWalker(unittest.TestCase):
    """Test traversal over small module graphs."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.context = AnalysisContext(package_root=str(self.root))
        self.builder = ReportBuilder("demo", str(self.root))
        self.walker = GraphWalker(self.context, self.builder)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, files: Dict[str, str]) -> None:
        for rel, text in files.items():
            path = self.root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

    def _path(self, rel: str) -> str:
        return str(self.root / rel)

    def test_diamond_with_cycle_is_analyzed_once(self):
        self._write(
            {
                "index.js": "export * from './a';\nexport * from './b';\n",
                "a.js": "export * from './shared';\nexport const a = 1;\n",
                "b.js": "export * from './shared';\nexport const b = 1;\n",
                "shared.js": "export * from './index';\nexport const s = 1;\n",
            }
        )
        self.walker.enqueue([self._path("index.js")])
        analyzed = self.walker.run()
        self.assertEqual(analyzed, 4)
        report = self.builder.build()
        self.assertEqual(
            report.processed_files,
            sorted(self._path(p) for p in ("index.js", "a.js", "b.js", "shared.js")),
        )
        self.assertEqual(report.value.names, ["a", "b", "s"])
        self.assertEqual(report.errors, [])

    def test_enqueue_skips_known_paths(self):
        self._write({"index.js": "export const x = 1;\n"})
        self.assertEqual(self.walker.enqueue([self._path("index.js"), self._path("index.js")]), 1)
        self.walker.run()
        self.assertEqual(self.walker.enqueue([self._path("index.js")]), 0)
        self.assertEqual(self.walker.pending, 0)

    def test_mixed_dialects(self):
        self._write(
            {
                "index.js": "export { runtime } from './impl';\n",
                "impl.js": "export function runtime() {}\n",
                "index.d.ts": "export * from './types';\n",
                "types.d.ts": "export interface Options { a: 1 }\n",
            }
        )
        self.walker.enqueue([self._path("index.js"), self._path("index.d.ts")])
        self.walker.run()
        report = self.builder.build()
        self.assertEqual(report.value.names, ["runtime"])
        self.assertEqual(report.type.names, ["Options"])
        self.assertEqual(len(report.processed_files), 4)

    def test_unrecognized_module_type(self):
        self._write({"data.json": "{}"})
        self.walker.enqueue([self._path("data.json")])
        self.walker.run()
        self.assertEqual(self.builder.errors, [f"Unrecognized module type: {self._path('data.json')}"])
        self.assertEqual(self.builder.processed_files, [self._path("data.json")])

    def test_extractor_failure_is_isolated(self):
        self._write({"boom.js": "export const x = 1;\n", "ok.js": "export const ok = 1;\n"})
        real = extract_value_module

        def flaky(path, context):
            if path.endswith("boom.js"):
                raise RuntimeError("kaboom")
            return real(path, context)

        with mock.patch("surface.walker.extract_value_module", side_effect=flaky):
            self.walker.enqueue([self._path("boom.js"), self._path("ok.js")])
            self.walker.run()

        report = self.builder.build()
        self.assertEqual(report.value.names, ["ok"])
        self.assertEqual(len(report.errors), 1)
        self.assertIn("Unexpected error analyzing", report.errors[0])
        self.assertIn("kaboom", report.errors[0])


if __name__ == "__main__":
    unittest.main()
