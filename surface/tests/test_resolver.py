"""
Unit tests for resolver.py

Tests suffix order, index fallback and verbatim resolution of relative specifiers.
"""

import tempfile
import unittest
from pathlib import Path

from surface.resolver import ModuleResolver, is_relative_specifier


class TestRelativeSpecifier(unittest.TestCase):
    """Test relative specifier detection."""

    def test_dot_slash(self):
        self.assertTrue(is_relative_specifier("./lib"))

    def test_parent(self):
        self.assertTrue(is_relative_specifier("../lib/index.js"))

    def test_bare_package(self):
        self.assertFalse(is_relative_specifier("lodash"))

    def test_scoped_package(self):
        self.assertFalse(is_relative_specifier("@org/pkg/sub"))


class TestModuleResolver(unittest.TestCase):
    """Test resolution order against a temporary directory tree."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _touch(self, rel: str) -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
        return path

    def test_first_suffix_wins(self):
        """Both x.a and x.b exist: [.a, .b] resolves to x.a."""
        a = self._touch("x.a")
        self._touch("x.b")
        resolver = ModuleResolver([".a", ".b"])
        self.assertEqual(resolver.resolve(str(self.root), "./x"), str(a))

    def test_suffix_order_is_respected(self):
        self._touch("x.a")
        b = self._touch("x.b")
        resolver = ModuleResolver([".b", ".a"])
        self.assertEqual(resolver.resolve(str(self.root), "./x"), str(b))

    def test_index_fallback(self):
        index = self._touch("lib/index.ts")
        resolver = ModuleResolver([".js", ".ts"])
        self.assertEqual(resolver.resolve(str(self.root), "./lib"), str(index))

    def test_suffix_beats_index(self):
        direct = self._touch("lib.js")
        self._touch("lib/index.js")
        resolver = ModuleResolver([".js"])
        self.assertEqual(resolver.resolve(str(self.root), "./lib"), str(direct))

    def test_verbatim_explicit_extension(self):
        explicit = self._touch("src/util.mjs")
        resolver = ModuleResolver([".js"])
        self.assertEqual(resolver.resolve(str(self.root), "./src/util.mjs"), str(explicit))

    def test_parent_directory(self):
        target = self._touch("shared.js")
        self._touch("nested/entry.js")
        resolver = ModuleResolver([".js"])
        self.assertEqual(resolver.resolve(str(self.root / "nested"), "../shared"), str(target))

    def test_not_found(self):
        resolver = ModuleResolver([".js"])
        self.assertIsNone(resolver.resolve(str(self.root), "./missing"))

    def test_directory_is_not_a_file(self):
        (self.root / "folder").mkdir()
        resolver = ModuleResolver([".js"])
        self.assertIsNone(resolver.resolve(str(self.root), "./folder"))

    def test_suffix_override(self):
        self._touch("x.js")
        dts = self._touch("x.d.ts")
        resolver = ModuleResolver([".js", ".d.ts"])
        self.assertEqual(resolver.resolve(str(self.root), "./x", [".d.ts"]), str(dts))


if __name__ == "__main__":
    unittest.main()
