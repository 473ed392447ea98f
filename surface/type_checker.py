"""
Declaration-level symbol tables for typed (TypeScript / declaration) modules.

The checker builds one :class:`ModuleSymbol` per file from its top-level
statements and answers the questions the type extractor asks:

- which names does a module export (including ``export *`` merges),
- what does an exported alias ultimately refer to,
- which facets (value, type) does a symbol carry,
- what documentation is attached to a symbol's declarations.

Same-name declarations merge into one symbol, so function overloads and
declaration merging (``interface Foo`` + ``const Foo``) combine their facets.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, List, Optional, Set, Tuple

from tree_sitter import Node

from core.analyzer_config import AnalyzerConfig
from surface.config import (
    COMMENT_NODE,
    DEFAULT_EXPORT_NAME,
    EXPORT_CLAUSE,
    EXPORT_SPECIFIER,
    EXPORT_STATEMENT,
    IMPORT_STATEMENT,
    NAMESPACE_DECLARATIONS,
    NAMESPACE_EXPORT,
    UNKNOWN_BINDING_NAME,
)
from surface.declarations import (
    declaration_binding_names,
    export_specifier_names,
    is_type_only_specifier,
    namespace_export_name,
    unwrap_declaration,
)
from surface.jsdoc import DocComment, get_preceding_doc_comment, parse_doc_comment
from surface.parser import ModuleParseError, has_token, node_text, parse_file, string_value
from surface.resolver import ModuleResolver, is_relative_specifier

logger = logging.getLogger(__name__)

# Typed candidates come first so `./x` prefers `x.d.ts` over `x.js`.
TYPED_RESOLVE_SUFFIXES: Tuple[str, ...] = (
    ".d.ts",
    ".ts",
    ".tsx",
    ".d.mts",
    ".mts",
    ".d.cts",
    ".cts",
)

# `./x.js` written in a declaration file means `./x.d.ts` (or `./x.ts`).
RUNTIME_TO_TYPED_SUFFIXES: Dict[str, Tuple[str, ...]] = {
    ".js": (".d.ts", ".ts", ".tsx"),
    ".jsx": (".d.ts", ".tsx"),
    ".mjs": (".d.mts", ".mts"),
    ".cjs": (".d.cts", ".cts"),
}

# Declaration kinds that make an export type-only when every declaration is one
TYPE_ONLY_EXPORT_KINDS: Set[str] = {EXPORT_SPECIFIER, NAMESPACE_EXPORT, "export_declaration"}


class SymbolFlags(IntFlag):
    NONE = 0
    VALUE = 1
    TYPE = 2
    NAMESPACE = 4
    ALIAS = 8


@dataclass
class Declaration:
    """One declaration site of a symbol.

    Attributes:
        kind: Node type of the declaration (or a synthetic kind).
        file_path: File holding the declaration.
        node: Statement whose leading comment documents the declaration.
        type_only: Whether this site is a type-only export.
    """

    kind: str
    file_path: str
    node: Optional[Node] = None
    type_only: bool = False


@dataclass(eq=False)
class CheckerSymbol:
    """A named binding of a module (local, imported or exported).

    Alias symbols point at their target through ``alias_specifier`` (module
    specifier, None for a binding of the same module) and ``alias_name``
    (export name, local name, or ``*`` for a whole-module namespace).
    """

    name: str
    module_path: str
    flags: SymbolFlags = SymbolFlags.NONE
    declarations: List[Declaration] = field(default_factory=list)
    alias_specifier: Optional[str] = None
    alias_name: Optional[str] = None

    @property
    def is_alias(self) -> bool:
        return bool(self.flags & SymbolFlags.ALIAS)

    @property
    def has_value_facet(self) -> bool:
        return bool(self.flags & SymbolFlags.VALUE)

    @property
    def has_type_facet(self) -> bool:
        if self.flags & SymbolFlags.TYPE:
            return True
        # Non-instantiated namespaces only exist in the type system.
        return bool(self.flags & SymbolFlags.NAMESPACE) and not self.has_value_facet


@dataclass(eq=False)
class ModuleSymbol:
    """Symbol table of one module file."""

    file_path: str
    root: Node
    locals: Dict[str, CheckerSymbol] = field(default_factory=dict)
    direct_exports: Dict[str, CheckerSymbol] = field(default_factory=dict)
    star_exports: List[Tuple[str, bool]] = field(default_factory=list)
    exports_cache: Optional[Dict[str, CheckerSymbol]] = None
    namespace_symbol: Optional[CheckerSymbol] = None
    export_assignment: Optional[CheckerSymbol] = None


def declaration_flags(node: Node) -> SymbolFlags:
    """Facets contributed by one declaration node."""
    kind = node.type
    if kind in ("interface_declaration", "type_alias_declaration"):
        return SymbolFlags.TYPE
    if kind in ("class_declaration", "abstract_class_declaration", "enum_declaration"):
        return SymbolFlags.VALUE | SymbolFlags.TYPE
    if kind in NAMESPACE_DECLARATIONS:
        if is_instantiated_namespace(node):
            return SymbolFlags.NAMESPACE | SymbolFlags.VALUE
        return SymbolFlags.NAMESPACE
    return SymbolFlags.VALUE


def is_instantiated_namespace(node: Node) -> bool:
    """A namespace is a runtime value when its body declares a value."""
    body = node.child_by_field_name("body")
    if body is None:
        return False
    for statement in body.named_children:
        inner = statement
        if statement.type == EXPORT_STATEMENT:
            inner = statement.child_by_field_name("declaration")
            if inner is None:
                continue
        decl = unwrap_declaration(inner)
        if decl is None:
            continue
        if declaration_flags(decl) & SymbolFlags.VALUE:
            return True
    return False


class DeclarationChecker:
    """Resolve exports, aliases, facets and documentation of typed modules.

    Args:
        package_root: Root directory of the analyzed package.
        config: Analyzer configuration (vendor directory, suffixes).
    """

    def __init__(self, package_root: str, config: Optional[AnalyzerConfig] = None):
        self.package_root = os.path.abspath(package_root)
        self.config = config or AnalyzerConfig()
        suffixes = TYPED_RESOLVE_SUFFIXES + tuple(
            s for s in self.config.resolve_suffixes if s not in TYPED_RESOLVE_SUFFIXES
        )
        self.resolver = ModuleResolver(suffixes)
        self._modules: Dict[str, Optional[ModuleSymbol]] = {}

    # ------------------------------------------------------------------
    # Module loading
    # ------------------------------------------------------------------

    def get_module_symbol(self, file_path: str) -> Optional[ModuleSymbol]:
        """Return the module symbol of ``file_path``.

        Returns None for files that are not modules (no import or export
        statement, i.e. global scripts).

        Raises:
            OSError: If the file cannot be read.
            ModuleParseError: If the file cannot be parsed.
        """
        path = os.path.abspath(file_path)
        if path in self._modules:
            return self._modules[path]
        module = self._build_module(path)
        self._modules[path] = module
        return module

    def _load(self, path: str) -> Optional[ModuleSymbol]:
        try:
            return self.get_module_symbol(path)
        except (OSError, ModuleParseError) as e:
            logger.warning("Could not load referenced module %s: %s", path, e)
            self._modules[path] = None
            return None

    def _build_module(self, path: str) -> Optional[ModuleSymbol]:
        tree, _ = parse_file(path)
        module = ModuleSymbol(file_path=path, root=tree.root_node)
        is_module = False

        for statement in tree.root_node.named_children:
            if statement.type == IMPORT_STATEMENT:
                is_module = True
                self._bind_import(module, statement)
            elif statement.type == EXPORT_STATEMENT:
                is_module = True
                self._bind_export(module, statement)
            else:
                decl = unwrap_declaration(statement)
                if decl is not None:
                    self._declare(module, decl, doc_node=statement)

        if not is_module:
            logger.debug("%s has no import/export statements; not a module", path)
            return None
        logger.debug(
            "Built symbol table for %s: %d locals, %d direct exports, %d star exports",
            path,
            len(module.locals),
            len(module.direct_exports),
            len(module.star_exports),
        )
        return module

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def _declare(self, module: ModuleSymbol, decl: Node, doc_node: Node) -> List[str]:
        """Add a declaration to module locals, merging same-name declarations."""
        flags = declaration_flags(decl)
        names = [
            n for n in declaration_binding_names(decl, expand_patterns=True)
            if n != UNKNOWN_BINDING_NAME
        ]
        for name in names:
            symbol = module.locals.get(name)
            if symbol is None or symbol.is_alias:
                symbol = CheckerSymbol(name=name, module_path=module.file_path)
                module.locals[name] = symbol
            symbol.flags |= flags
            symbol.declarations.append(
                Declaration(kind=decl.type, file_path=module.file_path, node=doc_node)
            )
        return names

    def _bind_import(self, module: ModuleSymbol, statement: Node) -> None:
        source = statement.child_by_field_name("source")
        if source is None:
            return
        specifier = string_value(source)

        def bind(local: str, imported: str, node: Node) -> None:
            if local in module.locals:
                return
            module.locals[local] = CheckerSymbol(
                name=local,
                module_path=module.file_path,
                flags=SymbolFlags.ALIAS,
                declarations=[Declaration(kind=node.type, file_path=module.file_path, node=statement)],
                alias_specifier=specifier,
                alias_name=imported,
            )

        for clause in statement.named_children:
            if clause.type != "import_clause":
                continue
            for part in clause.named_children:
                if part.type == "identifier":
                    bind(node_text(part), DEFAULT_EXPORT_NAME, part)
                elif part.type == "namespace_import":
                    for ident in part.named_children:
                        if ident.type == "identifier":
                            bind(node_text(ident), "*", part)
                elif part.type == "named_imports":
                    for spec in part.named_children:
                        if spec.type != "import_specifier":
                            continue
                        imported, local = export_specifier_names(spec)
                        bind(local, imported, spec)

    def _bind_export(self, module: ModuleSymbol, statement: Node) -> None:
        path = module.file_path
        type_only_statement = has_token(statement, "type")
        source = statement.child_by_field_name("source")
        specifier = string_value(source) if source is not None else None
        is_default = has_token(statement, "default")

        declaration = statement.child_by_field_name("declaration")
        if declaration is not None:
            decl = unwrap_declaration(declaration)
            if decl is None:
                logger.debug("Skipping non-exportable declaration in %s", path)
                return
            names = self._declare(module, decl, doc_node=statement)
            if is_default:
                if names:
                    # `export default function make()` exports `default`, not `make`
                    module.direct_exports[DEFAULT_EXPORT_NAME] = CheckerSymbol(
                        name=DEFAULT_EXPORT_NAME,
                        module_path=path,
                        flags=SymbolFlags.ALIAS,
                        declarations=[Declaration(kind=decl.type, file_path=path, node=statement)],
                        alias_name=names[0],
                    )
                else:
                    module.direct_exports[DEFAULT_EXPORT_NAME] = CheckerSymbol(
                        name=DEFAULT_EXPORT_NAME,
                        module_path=path,
                        flags=declaration_flags(decl),
                        declarations=[Declaration(kind=decl.type, file_path=path, node=statement)],
                    )
            else:
                for name in names:
                    module.direct_exports[name] = module.locals[name]
            return

        if specifier is None and has_token(statement, "="):
            self._bind_export_assignment(module, statement)
            return

        if is_default:
            value = statement.child_by_field_name("value")
            if value is not None and value.type == "identifier":
                module.direct_exports[DEFAULT_EXPORT_NAME] = CheckerSymbol(
                    name=DEFAULT_EXPORT_NAME,
                    module_path=path,
                    flags=SymbolFlags.ALIAS,
                    declarations=[Declaration(kind="export_assignment", file_path=path, node=statement)],
                    alias_name=node_text(value),
                )
            else:
                module.direct_exports[DEFAULT_EXPORT_NAME] = CheckerSymbol(
                    name=DEFAULT_EXPORT_NAME,
                    module_path=path,
                    flags=SymbolFlags.VALUE,
                    declarations=[Declaration(kind="export_assignment", file_path=path, node=statement)],
                )
            return

        has_clause = False
        for child in statement.named_children:
            if child.type == EXPORT_CLAUSE:
                has_clause = True
                for spec in child.named_children:
                    if spec.type != EXPORT_SPECIFIER:
                        continue
                    local, exported = export_specifier_names(spec)
                    module.direct_exports[exported] = CheckerSymbol(
                        name=exported,
                        module_path=path,
                        flags=SymbolFlags.ALIAS,
                        declarations=[
                            Declaration(
                                kind=EXPORT_SPECIFIER,
                                file_path=path,
                                node=statement,
                                type_only=type_only_statement or is_type_only_specifier(spec),
                            )
                        ],
                        alias_specifier=specifier,
                        alias_name=local,
                    )
            elif child.type == NAMESPACE_EXPORT and specifier is not None:
                has_clause = True
                name = namespace_export_name(child)
                module.direct_exports[name] = CheckerSymbol(
                    name=name,
                    module_path=path,
                    flags=SymbolFlags.ALIAS,
                    declarations=[
                        Declaration(
                            kind=NAMESPACE_EXPORT,
                            file_path=path,
                            node=statement,
                            type_only=type_only_statement,
                        )
                    ],
                    alias_specifier=specifier,
                    alias_name="*",
                )

        if not has_clause and specifier is not None and has_token(statement, "*"):
            module.star_exports.append((specifier, type_only_statement))
        elif not has_clause and specifier is None:
            logger.debug("Ignoring unsupported export form in %s: %s", path, node_text(statement)[:60])

    def _bind_export_assignment(self, module: ModuleSymbol, statement: Node) -> None:
        """Bind ``export = X``, the CommonJS shape of declaration files."""
        path = module.file_path
        expression = next((c for c in statement.named_children if c.type != COMMENT_NODE), None)
        declarations = [Declaration(kind="export_assignment", file_path=path, node=statement)]
        if expression is not None and expression.type == "identifier":
            module.export_assignment = CheckerSymbol(
                name=DEFAULT_EXPORT_NAME,
                module_path=path,
                flags=SymbolFlags.ALIAS,
                declarations=declarations,
                alias_name=node_text(expression),
            )
        else:
            module.export_assignment = CheckerSymbol(
                name=DEFAULT_EXPORT_NAME,
                module_path=path,
                flags=SymbolFlags.VALUE,
                declarations=declarations,
            )

    def _namespace_members(self, symbol: CheckerSymbol) -> Dict[str, CheckerSymbol]:
        """Members declared in the namespace bodies of ``symbol``.

        Declarations inside an ambient namespace are exported whether or not
        they carry the ``export`` keyword.
        """
        members: Dict[str, CheckerSymbol] = {}
        for decl in symbol.declarations:
            if decl.kind not in NAMESPACE_DECLARATIONS or decl.node is None:
                continue
            statement = decl.node
            if statement.type == EXPORT_STATEMENT:
                statement = statement.child_by_field_name("declaration")
            namespace = unwrap_declaration(statement) if statement is not None else None
            body = namespace.child_by_field_name("body") if namespace is not None else None
            if body is None:
                continue
            for member_statement in body.named_children:
                inner = member_statement
                if member_statement.type == EXPORT_STATEMENT:
                    inner = member_statement.child_by_field_name("declaration")
                member = unwrap_declaration(inner) if inner is not None else None
                if member is None:
                    continue
                for name in declaration_binding_names(member, expand_patterns=True):
                    if name == UNKNOWN_BINDING_NAME:
                        continue
                    target = members.get(name)
                    if target is None:
                        target = CheckerSymbol(name=name, module_path=symbol.module_path)
                        members[name] = target
                    target.flags |= declaration_flags(member)
                    target.declarations.append(
                        Declaration(kind=member.type, file_path=decl.file_path, node=member_statement)
                    )
        return members

    # ------------------------------------------------------------------
    # Exports and aliases
    # ------------------------------------------------------------------

    def get_exports_of_module(self, module: ModuleSymbol) -> List[CheckerSymbol]:
        """All exports of a module, ``export *`` targets merged in."""
        return list(self._resolve_exports(module, set()).values())

    def _resolve_exports(self, module: ModuleSymbol, visiting: Set[str]) -> Dict[str, CheckerSymbol]:
        if module.exports_cache is not None:
            return module.exports_cache
        if module.file_path in visiting:
            return dict(module.direct_exports)

        visiting.add(module.file_path)
        exports = dict(module.direct_exports)
        if module.export_assignment is not None:
            # `export = lib` is importable as the default plus the members of
            # a namespace merged into `lib`.
            exports.setdefault(DEFAULT_EXPORT_NAME, module.export_assignment)
            target = self.get_aliased_symbol(module.export_assignment)
            if target is not None:
                for name, member in self._namespace_members(target).items():
                    exports.setdefault(name, member)
        for specifier, type_only in module.star_exports:
            target = self._load_referenced(module.file_path, specifier)
            if target is None:
                continue
            for name, symbol in self._resolve_exports(target, visiting).items():
                # `export *` never forwards `default` and never shadows local exports
                if name == DEFAULT_EXPORT_NAME or name in exports:
                    continue
                if type_only:
                    symbol = CheckerSymbol(
                        name=name,
                        module_path=module.file_path,
                        flags=SymbolFlags.ALIAS,
                        declarations=[
                            Declaration(
                                kind="export_declaration",
                                file_path=module.file_path,
                                type_only=True,
                            )
                        ],
                        alias_specifier=specifier,
                        alias_name=name,
                    )
                exports[name] = symbol
        visiting.discard(module.file_path)

        if not visiting:
            module.exports_cache = exports
        return exports

    def get_aliased_symbol(self, symbol: CheckerSymbol) -> Optional[CheckerSymbol]:
        """Follow an alias chain to its final symbol.

        Returns the symbol itself if it is not an alias, or None when the
        chain cannot be resolved (missing module, missing export, cycle).
        """
        seen: Set[int] = set()
        current = symbol
        while current.is_alias:
            if id(current) in seen:
                logger.debug("Alias cycle while resolving %s", symbol.name)
                return None
            seen.add(id(current))
            resolved = self._resolve_alias_once(current)
            if resolved is None:
                return None
            current = resolved
        return current

    def _resolve_alias_once(self, alias: CheckerSymbol) -> Optional[CheckerSymbol]:
        if alias.alias_specifier is None:
            module = self._modules.get(alias.module_path)
            if module is None:
                return None
            target = module.locals.get(alias.alias_name or "")
            return None if target is alias else target

        target_module = self._load_referenced(alias.module_path, alias.alias_specifier)
        if target_module is None:
            return None
        if alias.alias_name == "*":
            return self._namespace_symbol(target_module)
        return self._resolve_exports(target_module, set()).get(alias.alias_name or "")

    def _namespace_symbol(self, module: ModuleSymbol) -> CheckerSymbol:
        if module.namespace_symbol is None:
            module.namespace_symbol = CheckerSymbol(
                name=os.path.basename(module.file_path),
                module_path=module.file_path,
                flags=SymbolFlags.VALUE | SymbolFlags.NAMESPACE,
                declarations=[Declaration(kind="source_file", file_path=module.file_path)],
            )
        return module.namespace_symbol

    def is_type_only_export(self, symbol: CheckerSymbol) -> bool:
        """True when every declaration of an export is a type-only export site."""
        if not symbol.declarations:
            return False
        return all(
            decl.kind in TYPE_ONLY_EXPORT_KINDS and decl.type_only
            for decl in symbol.declarations
        )

    def get_documentation_comment(self, symbol: CheckerSymbol) -> DocComment:
        """Aggregate JSDoc of every declaration of ``symbol``."""
        doc = DocComment()
        for decl in symbol.declarations:
            if decl.node is None:
                continue
            text = get_preceding_doc_comment(decl.node)
            if text:
                doc = doc.merge(parse_doc_comment(text))
        return doc

    # ------------------------------------------------------------------
    # Module specifier resolution
    # ------------------------------------------------------------------

    def _load_referenced(self, from_path: str, specifier: str) -> Optional[ModuleSymbol]:
        path = self.resolve_module_path(from_path, specifier)
        if path is None:
            logger.debug("Unresolved module '%s' referenced from %s", specifier, from_path)
            return None
        return self._load(path)

    def resolve_module_path(self, from_path: str, specifier: str) -> Optional[str]:
        """Resolve a module specifier the way a declaration file means it."""
        base_dir = os.path.dirname(from_path)
        if not is_relative_specifier(specifier):
            return self._resolve_package(base_dir, specifier)

        stem, ext = os.path.splitext(specifier)
        typed_suffixes = RUNTIME_TO_TYPED_SUFFIXES.get(ext)
        if typed_suffixes:
            for suffix in typed_suffixes:
                candidate = os.path.normpath(os.path.join(base_dir, stem + suffix))
                if os.path.isfile(candidate):
                    return os.path.abspath(candidate)
        return self.resolver.resolve(base_dir, specifier)

    def _resolve_package(self, base_dir: str, specifier: str) -> Optional[str]:
        """Find a bare specifier in the nearest vendor directory (or ``@types``)."""
        parts = specifier.split("/")
        package_name = "/".join(parts[:2]) if specifier.startswith("@") else parts[0]
        subpath = specifier[len(package_name):].lstrip("/")
        types_name = "@types/" + package_name.lstrip("@").replace("/", "__")

        directory = base_dir
        while True:
            for name in (package_name, types_name):
                package_dir = os.path.join(directory, self.config.vendor_dir, name)
                if os.path.isdir(package_dir):
                    resolved = self._resolve_package_entry(package_dir, subpath)
                    if resolved is not None:
                        return resolved
            parent = os.path.dirname(directory)
            if parent == directory:
                return None
            directory = parent

    def _resolve_package_entry(self, package_dir: str, subpath: str) -> Optional[str]:
        if subpath:
            return self.resolver.resolve(package_dir, "./" + subpath)

        manifest_path = os.path.join(package_dir, "package.json")
        if os.path.isfile(manifest_path):
            try:
                with open(manifest_path, "r", encoding="utf-8") as f:
                    manifest = json.load(f)
            except (OSError, ValueError) as e:
                logger.debug("Unreadable dependency manifest %s: %s", manifest_path, e)
                manifest = {}
            if isinstance(manifest, dict):
                for key in ("types", "typings"):
                    entry = manifest.get(key)
                    if isinstance(entry, str):
                        resolved = self.resolver.resolve(package_dir, _relative(entry))
                        if resolved is not None:
                            return resolved
                main = manifest.get("main")
                if isinstance(main, str):
                    stem = os.path.splitext(main)[0]
                    resolved = self.resolver.resolve(package_dir, _relative(stem), (".d.ts",))
                    if resolved is not None:
                        return resolved

        return self.resolver.resolve(package_dir, "./index", (".d.ts",))

    def is_external_symbol(self, symbol: CheckerSymbol) -> bool:
        """External when no declaration lives under the package root, or any
        declaration lives inside a vendor directory."""
        paths = [decl.file_path for decl in symbol.declarations]
        if not paths:
            return False
        inside = [p for p in paths if _is_under(p, self.package_root)]
        if not inside:
            return True
        vendor = self.config.vendor_dir
        return any(vendor in os.path.relpath(p, self.package_root).split(os.sep) for p in inside)


def _relative(entry: str) -> str:
    return entry if entry.startswith(".") else "./" + entry


def _is_under(path: str, root: str) -> bool:
    try:
        return os.path.commonpath([os.path.abspath(path), root]) == root
    except ValueError:
        return False
