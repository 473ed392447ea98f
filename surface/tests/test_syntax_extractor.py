"""
Unit tests for syntax_extractor.py

Tests ESM and CommonJS export extraction from JavaScript modules,
documentation detection and relative re-export discovery.
"""

import tempfile
import unittest
from pathlib import Path
from typing import Dict

from surface.context import AnalysisContext
from surface.models import ExportCategory
from surface.syntax_extractor import extract_value_module


class SyntaxExtractorTestCase(unittest.TestCase):
    """Base class writing small module trees into a temp directory."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.context = AnalysisContext(package_root=str(self.root))

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, files: Dict[str, str]) -> None:
        for rel, text in files.items():
            path = self.root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

    def _extract(self, source: str, name: str = "index.js"):
        self._write({name: source})
        return extract_value_module(str(self.root / name), self.context)

    @staticmethod
    def _names(result):
        return [r.name for r in result.records]

    @staticmethod
    def _documented(result):
        return {r.name: r.documented for r in result.records}


class TestEsmExports(SyntaxExtractorTestCase):
    """Test ECMAScript module export forms."""

    def test_documented_function_and_anonymous_default(self):
        result = self._extract(
            "/**\n"
            " * Foo does things.\n"
            " */\n"
            "export function foo() {}\n"
            "\n"
            "export default class {}\n"
        )
        self.assertEqual(self._names(result), ["foo", "default"])
        self.assertEqual(self._documented(result), {"foo": True, "default": False})
        self.assertTrue(all(r.category == ExportCategory.VALUE for r in result.records))
        self.assertEqual(result.errors, [])

    def test_regular_comment_is_not_documentation(self):
        result = self._extract("/* Regular block comment */\nexport const add = (a, b) => a + b;\n")
        self.assertEqual(self._documented(result), {"add": False})

    def test_tag_only_doc_counts(self):
        result = self._extract("/** @deprecated */\nexport class Legacy {}\n")
        self.assertEqual(self._documented(result), {"Legacy": True})

    def test_variable_bindings(self):
        result = self._extract("export const a = 1, { b } = obj, [c] = arr;\n")
        self.assertEqual(self._names(result), ["a", "[ObjectPattern]", "unknown"])

    def test_export_clause_uses_exported_names(self):
        result = self._extract(
            "const x = 1;\nconst z = 2;\n/** Both. */\nexport { x as y, z };\n"
        )
        self.assertEqual(self._names(result), ["y", "z"])
        self.assertTrue(all(r.documented for r in result.records))

    def test_default_expression(self):
        result = self._extract("const api = {};\nexport default api;\n")
        self.assertEqual(self._names(result), ["default"])

    def test_generator_and_class_declarations(self):
        result = self._extract("export function* gen() {}\nexport class Widget {}\n")
        self.assertEqual(self._names(result), ["gen", "Widget"])


class TestReExports(SyntaxExtractorTestCase):
    """Test re-export routing into discovered modules and the re-export registry."""

    def test_relative_star_is_discovered(self):
        self._write({"lib.js": "export const inner = 1;\n"})
        result = self._extract("export * from './lib';\n")
        self.assertEqual(result.records, [])
        self.assertEqual(result.discovered, [str(self.root / "lib.js")])
        self.assertEqual(result.re_exports, [])

    def test_bare_specifiers_are_registered(self):
        result = self._extract(
            "export * from 'lodash';\nexport { q } from 'pkg';\n"
        )
        self.assertEqual(self._names(result), ["q"])
        self.assertEqual(result.re_exports, ["lodash", "pkg"])
        self.assertEqual(result.discovered, [])

    def test_namespace_reexport(self):
        self._write({"ns/index.js": "export const n = 1;\n"})
        result = self._extract("export * as ns from './ns';\n")
        self.assertEqual(self._names(result), ["ns"])
        self.assertEqual(result.discovered, [str(self.root / "ns" / "index.js")])

    def test_named_relative_reexport_is_discovered(self):
        self._write({"util.js": "export function helper() {}\n"})
        result = self._extract("export { helper } from './util';\n")
        self.assertEqual(self._names(result), ["helper"])
        self.assertEqual(result.discovered, [str(self.root / "util.js")])

    def test_unresolved_relative_reexport_is_an_error(self):
        result = self._extract("export * from './missing';\n")
        self.assertEqual(result.discovered, [])
        self.assertEqual(len(result.errors), 1)
        self.assertIn("Could not resolve re-export './missing'", result.errors[0])

    def test_duplicate_specifiers_resolve_once(self):
        self._write({"lib.js": "export const a = 1;\n"})
        result = self._extract("export * from './lib';\nexport { a } from './lib';\n")
        self.assertEqual(result.discovered, [str(self.root / "lib.js")])


class TestCommonJsExports(SyntaxExtractorTestCase):
    """Test CommonJS export assignment forms."""

    def test_exports_members(self):
        result = self._extract(
            "exports.alpha = 1;\n"
            "/** Beta. */\n"
            "module.exports.beta = function () {};\n"
        )
        self.assertEqual(self._names(result), ["alpha", "beta"])
        self.assertEqual(self._documented(result), {"alpha": False, "beta": True})

    def test_chained_assignment(self):
        result = self._extract("exports.a = exports.b = void 0;\n")
        self.assertEqual(self._names(result), ["a", "b"])

    def test_esmodule_marker_is_skipped(self):
        result = self._extract("exports.__esModule = true;\nexports.ok = 1;\n")
        self.assertEqual(self._names(result), ["ok"])

    def test_module_exports_object(self):
        result = self._extract(
            "const gamma = 1;\nmodule.exports = { gamma, delta: 2, 'quoted-key': 3 };\n"
        )
        self.assertEqual(self._names(result), ["gamma", "delta", "quoted-key"])

    def test_module_exports_require_is_followed(self):
        self._write({"impl.js": "exports.real = 1;\n"})
        result = self._extract("module.exports = require('./impl');\n")
        self.assertEqual(result.records, [])
        self.assertEqual(result.discovered, [str(self.root / "impl.js")])

    def test_module_exports_function_is_default(self):
        result = self._extract("module.exports = function main() {};\n")
        self.assertEqual(self._names(result), ["default"])

    def test_export_star_helper(self):
        result = self._extract('__exportStar(require("./sub"), exports);\n')
        self.assertEqual(len(result.errors), 1)
        self.assertIn("'./sub'", result.errors[0])

    def test_commonjs_can_be_disabled(self):
        from core.analyzer_config import AnalyzerConfig

        self.context = AnalysisContext(
            package_root=str(self.root),
            config=AnalyzerConfig(commonjs_exports=False),
        )
        result = self._extract("exports.alpha = 1;\n")
        self.assertEqual(result.records, [])


class TestExtractionFailures(SyntaxExtractorTestCase):
    """Test unreadable modules."""

    def test_missing_file(self):
        result = extract_value_module(str(self.root / "absent.js"), self.context)
        self.assertEqual(result.records, [])
        self.assertEqual(len(result.errors), 1)
        self.assertIn("Could not read value module", result.errors[0])


if __name__ == "__main__":
    unittest.main()
