"""
Unit tests for type_extractor.py and the declaration checker behind it

Tests Value/Type classification, type-only exports, alias resolution,
documentation aggregation and external origin of typed module exports.
"""

import json
import tempfile
import unittest
from pathlib import Path
from typing import Dict

from surface.context import AnalysisContext
from surface.models import ExportCategory
from surface.type_extractor import extract_typed_module


class TypeExtractorTestCase(unittest.TestCase):
    """Base class writing typed module trees into a temp directory."""

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

    def _extract(self, name: str = "index.d.ts"):
        return extract_typed_module(str(self.root / name), self.context)

    @staticmethod
    def _names(result, category: ExportCategory):
        return [r.name for r in result.records if r.category == category]

    @staticmethod
    def _documented(result, category: ExportCategory):
        return {r.name: r.documented for r in result.records if r.category == category}


class TestClassification(TypeExtractorTestCase):
    """Test facet classification of local declarations."""

    def test_declaration_file_facets(self):
        self._write(
            {
                "index.d.ts": (
                    "/** A widget. */\n"
                    "export declare class Widget {\n"
                    "    size: number;\n"
                    "}\n"
                    "/** Options. */\n"
                    "export interface WidgetOptions { size: number }\n"
                    "export type Size = 'sm' | 'lg';\n"
                    "export declare const VERSION: string;\n"
                    "export declare function make(): Widget;\n"
                )
            }
        )
        result = self._extract()
        self.assertEqual(
            sorted(self._names(result, ExportCategory.VALUE)),
            ["VERSION", "Widget", "make"],
        )
        self.assertEqual(
            sorted(self._names(result, ExportCategory.TYPE)),
            ["Size", "Widget", "WidgetOptions"],
        )
        self.assertEqual(
            self._documented(result, ExportCategory.TYPE),
            {"Widget": True, "WidgetOptions": True, "Size": False},
        )
        self.assertEqual(result.errors, [])
        self.assertEqual(result.external_names, [])

    def test_type_only_export_of_merged_symbol(self):
        """A value+type symbol exported with `export type` is Type only."""
        self._write(
            {
                "index.ts": (
                    "interface Foo { a: string }\n"
                    "declare function Foo(): void;\n"
                    "export type { Foo };\n"
                )
            }
        )
        result = self._extract("index.ts")
        self.assertEqual(self._names(result, ExportCategory.VALUE), [])
        self.assertEqual(self._names(result, ExportCategory.TYPE), ["Foo"])

    def test_type_only_specifier(self):
        self._write(
            {
                "index.ts": (
                    "declare class Bar {}\n"
                    "declare const baz: number;\n"
                    "export { type Bar, baz };\n"
                )
            }
        )
        result = self._extract("index.ts")
        self.assertEqual(self._names(result, ExportCategory.VALUE), ["baz"])
        self.assertEqual(self._names(result, ExportCategory.TYPE), ["Bar"])

    def test_uninstantiated_namespace_is_type_only(self):
        self._write(
            {
                "index.d.ts": (
                    "export declare namespace Shapes {\n"
                    "    interface Circle { r: number }\n"
                    "}\n"
                )
            }
        )
        result = self._extract()
        self.assertEqual(self._names(result, ExportCategory.VALUE), [])
        self.assertEqual(self._names(result, ExportCategory.TYPE), ["Shapes"])

    def test_internal_names_are_skipped(self):
        self._write(
            {
                "index.d.ts": (
                    "export declare const __private: number;\n"
                    "export declare const visible: number;\n"
                )
            }
        )
        result = self._extract()
        self.assertEqual(self._names(result, ExportCategory.VALUE), ["visible"])

    def test_documentation_follows_local_declaration(self):
        self._write(
            {
                "index.ts": (
                    "/** Adds numbers. */\n"
                    "declare function add(a: number, b: number): number;\n"
                    "export { add };\n"
                )
            }
        )
        result = self._extract("index.ts")
        self.assertEqual(self._documented(result, ExportCategory.VALUE), {"add": True})


class TestDefaultExports(TypeExtractorTestCase):
    """Default exports are reported as `default`, never by their local name."""

    def test_named_default_function(self):
        self._write({"index.d.ts": "/** Make. */\nexport default function make(): void;\n"})
        result = self._extract()
        self.assertEqual(
            [(r.name, r.category, r.documented) for r in result.records],
            [("default", ExportCategory.VALUE, True)],
        )

    def test_named_default_class(self):
        self._write({"index.ts": "export default class Widget {}\n"})
        result = self._extract("index.ts")
        self.assertEqual(self._names(result, ExportCategory.VALUE), ["default"])
        self.assertEqual(self._names(result, ExportCategory.TYPE), ["default"])

    def test_default_identifier(self):
        self._write(
            {
                "index.d.ts": (
                    "/** Options. */\n"
                    "interface Options { a: number }\n"
                    "export default Options;\n"
                )
            }
        )
        result = self._extract()
        self.assertEqual(self._names(result, ExportCategory.VALUE), [])
        self.assertEqual(self._documented(result, ExportCategory.TYPE), {"default": True})


class TestExportAssignment(TypeExtractorTestCase):
    """`export = X` exposes a default plus the members of a merged namespace."""

    def test_function_with_merged_namespace(self):
        self._write(
            {
                "index.d.ts": (
                    "/** Library entry. */\n"
                    "declare function lib(): void;\n"
                    "declare namespace lib {\n"
                    "    /** Options. */\n"
                    "    interface Options { a: number }\n"
                    "    function helper(): void;\n"
                    "}\n"
                    "export = lib;\n"
                )
            }
        )
        result = self._extract()
        self.assertEqual(self._names(result, ExportCategory.VALUE), ["default", "helper"])
        self.assertEqual(self._names(result, ExportCategory.TYPE), ["Options"])
        self.assertEqual(
            self._documented(result, ExportCategory.VALUE),
            {"default": True, "helper": False},
        )
        self.assertTrue(self._documented(result, ExportCategory.TYPE)["Options"])
        self.assertEqual(result.errors, [])

    def test_plain_value(self):
        self._write({"index.d.ts": "declare const VERSION: string;\nexport = VERSION;\n"})
        result = self._extract()
        self.assertEqual(self._names(result, ExportCategory.VALUE), ["default"])
        self.assertEqual(self._names(result, ExportCategory.TYPE), [])

    def test_unresolved_target_is_an_error(self):
        self._write({"index.d.ts": "export = missing;\n"})
        result = self._extract()
        self.assertEqual(result.records, [])
        self.assertEqual(len(result.errors), 1)
        self.assertIn("Could not resolve export 'default'", result.errors[0])


class TestReExports(TypeExtractorTestCase):
    """Test alias chains, star merges and discovered modules."""

    def test_star_named_and_namespace_reexports(self):
        self._write(
            {
                "index.d.ts": (
                    "export * from './widgets';\n"
                    "export { helper as renamed } from './util';\n"
                    "export * as ns from './util';\n"
                ),
                "widgets.d.ts": "export declare const w: number;\n",
                "util.d.ts": "/** Helps. */\nexport declare function helper(): void;\n",
            }
        )
        result = self._extract()
        self.assertEqual(
            sorted(self._names(result, ExportCategory.VALUE)),
            ["ns", "renamed", "w"],
        )
        self.assertEqual(self._names(result, ExportCategory.TYPE), [])
        self.assertTrue(self._documented(result, ExportCategory.VALUE)["renamed"])
        self.assertEqual(result.discovered, [str(self.root / "widgets.d.ts")])
        self.assertEqual(result.errors, [])

    def test_js_specifier_maps_to_declaration_file(self):
        self._write(
            {
                "index.d.ts": "export { thing } from './impl.js';\n",
                "impl.d.ts": "export interface thing { x: 1 }\n",
            }
        )
        result = self._extract()
        self.assertEqual(self._names(result, ExportCategory.TYPE), ["thing"])

    def test_alias_cycle_is_an_error(self):
        self._write(
            {
                "index.d.ts": "export { a } from './other';\n",
                "other.d.ts": "export { a } from './index';\n",
            }
        )
        result = self._extract()
        self.assertEqual(result.records, [])
        self.assertEqual(len(result.errors), 1)
        self.assertIn("Could not resolve export 'a'", result.errors[0])

    def test_bare_star_reexport_is_registered(self):
        self._write({"index.d.ts": "export * from 'some-dep';\nexport declare const own: 1;\n"})
        result = self._extract()
        self.assertEqual(result.re_exports, ["some-dep"])
        self.assertEqual(self._names(result, ExportCategory.VALUE), ["own"])


class TestExternalOrigin(TypeExtractorTestCase):
    """Test dependency-originated exports."""

    def test_reexport_from_installed_dependency(self):
        self._write(
            {
                "index.d.ts": "export { ext } from 'dep';\nexport declare const mine: number;\n",
                "node_modules/dep/package.json": json.dumps({"name": "dep", "types": "index.d.ts"}),
                "node_modules/dep/index.d.ts": "/** From dep. */\nexport declare function ext(): void;\n",
            }
        )
        result = self._extract()
        self.assertEqual(sorted(self._names(result, ExportCategory.VALUE)), ["ext", "mine"])
        self.assertEqual(result.external_names, ["ext"])
        self.assertTrue(self._documented(result, ExportCategory.VALUE)["ext"])

    def test_types_package_fallback(self):
        self._write(
            {
                "index.d.ts": "export { Props } from 'react';\n",
                "node_modules/@types/react/index.d.ts": "export interface Props { a: 1 }\n",
            }
        )
        result = self._extract()
        self.assertEqual(self._names(result, ExportCategory.TYPE), ["Props"])
        self.assertEqual(result.external_names, ["Props"])

    def test_missing_dependency_counts_as_external(self):
        self._write({"index.d.ts": "export { gone } from 'not-installed';\n"})
        result = self._extract()
        self.assertEqual(result.records, [])
        self.assertEqual(result.external_names, ["gone"])
        self.assertEqual(len(result.errors), 1)


class TestModuleSymbol(TypeExtractorTestCase):
    """Test files without a module symbol and unreadable files."""

    def test_global_script_has_no_module_symbol(self):
        self._write({"global.d.ts": "declare const g: number;\n"})
        result = self._extract("global.d.ts")
        self.assertEqual(result.records, [])
        self.assertEqual(len(result.errors), 1)
        self.assertTrue(result.errors[0].startswith("Could not find module symbol for: "))

    def test_missing_file(self):
        result = self._extract("absent.d.ts")
        self.assertEqual(len(result.errors), 1)
        self.assertIn("Could not read typed module", result.errors[0])


if __name__ == "__main__":
    unittest.main()
