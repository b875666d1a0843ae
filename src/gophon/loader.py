"""Package loading -- turns one directory of Go files into a PackageResult."""

from __future__ import annotations

import logging
import os
from typing import Protocol

from tree_sitter import Node

from .errors import LoadError
from .extractors.go_extractor import (
    extract_declarations,
    first_error_line,
    has_ignore_constraint,
    package_name,
    parse_source,
)
from .fs import FileSystem, LocalFileSystem
from .models import CompilationUnit, PackageResult, Symbol

logger = logging.getLogger(__name__)


class PackageLoader(Protocol):
    """Capability injected into the scanner to load a single package."""

    def load_package(self, relative_path: str, base_module_path: str) -> PackageResult:
        ...


def _join_path(*parts: str) -> str:
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


def directory_package_path(base_module_path: str, relative_path: str) -> str:
    """Import path derived purely from the directory layout."""
    return _join_path(base_module_path, relative_path)


def canonical_package_path(
    base_module_path: str, relative_path: str, declared_name: str
) -> str:
    """Externally visible package path.

    The last directory segment is replaced by the *declared* package name,
    so a ``mismatched_dir`` holding ``package different_pkg`` maps to
    ``<base>/different_pkg``.  The root package is the module itself.
    """
    segments = [s for s in relative_path.replace("\\", "/").split("/") if s and s != "."]
    if not segments:
        return _join_path(base_module_path)
    return _join_path(base_module_path, *segments[:-1], declared_name)


def is_go_source(name: str) -> bool:
    """Mirror the go tool's file selection (tests and ``_``/``.`` files excluded)."""
    return (
        name.endswith(".go")
        and not name.endswith("_test.go")
        and not name.startswith(("_", "."))
    )


class GoPackageLoader:
    """Load Go packages from *source_root* through *fs* using tree-sitter."""

    def __init__(self, source_root: str, fs: FileSystem | None = None) -> None:
        self.source_root = source_root
        self.fs = fs if fs is not None else LocalFileSystem()

    def package_dir(self, relative_path: str) -> str:
        if not relative_path or relative_path == ".":
            return self.source_root
        return os.path.join(self.source_root, *relative_path.replace("\\", "/").split("/"))

    def load_package(self, relative_path: str, base_module_path: str) -> PackageResult:
        pkg_dir = self.package_dir(relative_path)
        try:
            entries = self.fs.list_dir(pkg_dir)
        except OSError as exc:
            raise LoadError(relative_path, f"cannot list {pkg_dir}: {exc}") from exc

        names = sorted(e.name for e in entries if not e.is_dir and is_go_source(e.name))

        # Parse every candidate file first; the declared package name decides
        # the canonical path of all of them.
        parsed: list[tuple[str, str, Node]] = []
        declared: dict[str, str] = {}
        for name in names:
            path = os.path.join(pkg_dir, name)
            try:
                source = self.fs.read_text(path)
            except (OSError, UnicodeDecodeError) as exc:
                raise LoadError(relative_path, f"cannot read {name}: {exc}") from exc
            if has_ignore_constraint(source):
                logger.debug("Skipping %s (build constraint: ignore)", path)
                continue
            root = parse_source(source).root_node
            error_line = first_error_line(root)
            if error_line is not None:
                raise LoadError(relative_path, f"{name}:{error_line}: syntax error")
            pkg_name = package_name(root)
            if not pkg_name:
                raise LoadError(relative_path, f"{name}: missing package clause")
            declared.setdefault(pkg_name, name)
            parsed.append((path, source, root))

        if len(declared) > 1:
            found = ", ".join(f"{pkg} ({fname})" for pkg, fname in declared.items())
            raise LoadError(relative_path, f"found multiple packages: {found}")

        if not parsed:
            logger.debug("No Go package in %s", pkg_dir)
            return PackageResult(
                package_path=directory_package_path(base_module_path, relative_path),
            )

        pkg_path = canonical_package_path(base_module_path, relative_path, next(iter(declared)))
        units: list[CompilationUnit] = []
        symbols: list[Symbol] = []
        for path, source, root in parsed:
            unit = CompilationUnit(path=path, package_path=pkg_path, fs=self.fs, content=source)
            units.append(unit)
            symbols.extend(extract_declarations(unit, root))

        return PackageResult.from_symbols(pkg_path, units, symbols)
