"""Tree-sitter extractor for top-level Go declarations.

Walks the syntax tree of one compilation unit and produces ``Symbol``
records for constants, variables, types, functions and methods.  Every
symbol carries the line range of its own spec (not of the enclosing
``const (...)`` / ``var (...)`` / ``type (...)`` group) so grouped bindings
can be sliced independently.
"""

from __future__ import annotations

import logging
import re

import tree_sitter_go
from tree_sitter import Language, Node, Parser, Tree

from ..models import CompilationUnit, SourceRange, Symbol, SymbolKind

logger = logging.getLogger(__name__)

BLANK_IDENTIFIER = "_"

# Build constraint that excludes a file from every build.
_IGNORE_CONSTRAINT_RE = re.compile(r"^//\s*(?:go:build|\+build)\s+ignore\s*$")

_VALUE_SPECS: dict[str, tuple[str, SymbolKind]] = {
    "const_declaration": ("const_spec", SymbolKind.constant),
    "var_declaration": ("var_spec", SymbolKind.variable),
}


# --------------------------------------------------------------------------
# Grammar / parsing
# --------------------------------------------------------------------------

_grammar_cache: dict[str, Language] = {}


def _get_grammar() -> Language:
    if "go" not in _grammar_cache:
        _grammar_cache["go"] = Language(tree_sitter_go.language())
    return _grammar_cache["go"]


def parse_source(source: str) -> Tree:
    """Parse Go *source*.  Parsers are not shared between threads."""
    parser = Parser(_get_grammar())
    return parser.parse(source.encode("utf-8"))


def node_text(node: Node) -> str:
    text = node.text
    return text.decode("utf-8", errors="replace") if text else ""


def first_error_line(root: Node) -> int | None:
    """Return the 1-based line of the first syntax error under *root*."""
    if not root.has_error:
        return None
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        stack.extend(reversed([c for c in node.children if c.has_error or c.is_missing]))
    return root.start_point[0] + 1


def package_name(root: Node) -> str | None:
    """Return the identifier of the file's ``package`` clause, if any."""
    for child in root.named_children:
        if child.type == "package_clause":
            for ident in child.named_children:
                if ident.type in ("package_identifier", "identifier"):
                    return node_text(ident)
    return None


def has_ignore_constraint(source: str) -> bool:
    """True when the file header carries a ``//go:build ignore`` constraint."""
    for line in source.splitlines():
        stripped = line.strip()
        if stripped.startswith("package "):
            return False
        if _IGNORE_CONSTRAINT_RE.match(stripped):
            return True
    return False


def extract_imports(source: str) -> str:
    """Return every ``import`` declaration of *source*, joined by newlines.

    Unparsable sources yield ``""``.
    """
    root = parse_source(source).root_node
    if root.has_error:
        return ""
    blocks = [
        node_text(child).strip()
        for child in root.named_children
        if child.type == "import_declaration"
    ]
    return "\n".join(b for b in blocks if b)


# --------------------------------------------------------------------------
# Declarations
# --------------------------------------------------------------------------

def _source_range(unit: CompilationUnit, node: Node) -> SourceRange:
    return SourceRange(unit, node.start_point[0] + 1, node.end_point[0] + 1)


def _iter_specs(decl: Node, spec_types: tuple[str, ...]):
    # Grouped specs are either direct children or wrapped in a *_spec_list.
    for child in decl.named_children:
        if child.type in spec_types:
            yield child
        elif child.type.endswith("_spec_list"):
            for spec in child.named_children:
                if spec.type in spec_types:
                    yield spec


def _value_symbols(
    unit: CompilationUnit, decl: Node, spec_type: str, kind: SymbolKind
) -> list[Symbol]:
    symbols: list[Symbol] = []
    for spec in _iter_specs(decl, (spec_type,)):
        spec_range = _source_range(unit, spec)
        for name_node in spec.children_by_field_name("name"):
            if name_node.type != "identifier":
                continue
            name = node_text(name_node)
            if name == BLANK_IDENTIFIER:
                continue
            symbols.append(Symbol(
                kind=kind, name=name, package_path=unit.package_path, range=spec_range,
            ))
    return symbols


def _type_symbols(unit: CompilationUnit, decl: Node) -> list[Symbol]:
    symbols: list[Symbol] = []
    for spec in _iter_specs(decl, ("type_spec", "type_alias")):
        name_node = spec.child_by_field_name("name")
        if name_node is None:
            continue
        name = node_text(name_node)
        if name == BLANK_IDENTIFIER:
            continue
        symbols.append(Symbol(
            kind=SymbolKind.type,
            name=name,
            package_path=unit.package_path,
            range=_source_range(unit, spec),
        ))
    return symbols


def receiver_type(decl: Node) -> str:
    """Return ``"*T"`` or ``"T"`` for a method declaration, ``""`` otherwise.

    Type arguments of generic receivers are dropped: ``*Stack[T]`` becomes
    ``"*Stack"``.
    """
    receiver = decl.child_by_field_name("receiver")
    if receiver is None:
        return ""
    params = [c for c in receiver.named_children if c.type == "parameter_declaration"]
    if not params:
        return ""
    type_node = params[0].child_by_field_name("type")
    pointer = False
    while type_node is not None and type_node.type in ("pointer_type", "parenthesized_type"):
        if type_node.type == "pointer_type":
            pointer = True
        inner = type_node.named_children
        type_node = inner[0] if inner else None
    if type_node is None:
        return ""
    if type_node.type == "generic_type":
        base = type_node.child_by_field_name("type")
        name = node_text(base) if base is not None else node_text(type_node)
    else:
        name = node_text(type_node)
    name = re.split(r"[\[\s]", name, maxsplit=1)[0]
    return f"*{name}" if pointer else name


def _function_symbol(unit: CompilationUnit, decl: Node) -> Symbol | None:
    name_node = decl.child_by_field_name("name")
    if name_node is None:
        return None
    name = node_text(name_node)
    if name == BLANK_IDENTIFIER:
        return None
    recv = receiver_type(decl) if decl.type == "method_declaration" else ""
    return Symbol(
        kind=SymbolKind.function,
        name=name,
        package_path=unit.package_path,
        range=_source_range(unit, decl),
        receiver_type=recv,
    )


def extract_declarations(unit: CompilationUnit, root: Node) -> list[Symbol]:
    """Return a Symbol for every top-level declaration under *root*."""
    symbols: list[Symbol] = []
    for decl in root.named_children:
        if decl.type in _VALUE_SPECS:
            spec_type, kind = _VALUE_SPECS[decl.type]
            symbols.extend(_value_symbols(unit, decl, spec_type, kind))
        elif decl.type == "type_declaration":
            symbols.extend(_type_symbols(unit, decl))
        elif decl.type in ("function_declaration", "method_declaration"):
            sym = _function_symbol(unit, decl)
            if sym is not None:
                symbols.append(sym)
    logger.debug("Extracted %d declaration(s) from %s", len(symbols), unit.path)
    return symbols
