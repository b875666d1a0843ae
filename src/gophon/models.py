"""Data model for gophon's scan and index pipeline."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from .fs import FileSystem

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Compilation units and line ranges
# ---------------------------------------------------------------------------

class CompilationUnit:
    """One Go source file belonging to exactly one package.

    The raw text is read lazily through the injected filesystem and cached
    on first access.  The cache is filled at most once; the lock is per unit
    so unrelated files never contend.
    """

    def __init__(
        self,
        path: str,
        package_path: str,
        fs: FileSystem | None = None,
        content: str | None = None,
    ) -> None:
        if fs is None:
            from .fs import LocalFileSystem

            fs = LocalFileSystem()
        self.path = path
        self.package_path = package_path
        self._fs = fs
        self._content = content
        self._imports: str | None = None
        self._lock = threading.Lock()
        self._imports_lock = threading.Lock()

    @property
    def file_name(self) -> str:
        return self.path.replace("\\", "/").rsplit("/", 1)[-1]

    def text(self) -> str:
        """Return the full file text, or ``""`` if it cannot be read."""
        cached = self._content
        if cached is not None:
            return cached
        with self._lock:
            if self._content is not None:
                return self._content
            try:
                content = self._fs.read_text(self.path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Cannot read %s: %s", self.path, exc)
                return ""
            self._content = content
            return content

    def imports(self) -> str:
        """Return the file's import declarations joined by newlines.

        Derived from the cached text on first use and kept for the symbols
        that share this file.
        """
        cached = self._imports
        if cached is not None:
            return cached
        from .extractors.go_extractor import extract_imports

        with self._imports_lock:
            if self._imports is not None:
                return self._imports
            content = self.text()
            if not content:
                return ""
            self._imports = extract_imports(content)
            return self._imports

    def __repr__(self) -> str:
        return f"CompilationUnit(path={self.path!r}, package_path={self.package_path!r})"


def slice_lines(unit: CompilationUnit | None, start_line: int, end_line: int) -> str:
    """Return lines *start_line*..*end_line* (1-based, inclusive) of *unit*.

    Any invalid range yields ``""``.  Carriage returns are stripped.
    """
    if unit is None:
        return ""
    content = unit.text()
    if not content:
        return ""
    lines = content.split("\n")
    if start_line < 1 or end_line > len(lines) or start_line > end_line:
        return ""
    return "\n".join(lines[start_line - 1:end_line]).replace("\r", "")


@dataclass(frozen=True)
class SourceRange:
    """A 1-based inclusive line range inside a compilation unit."""

    unit: CompilationUnit | None
    start_line: int
    end_line: int

    def text(self) -> str:
        return slice_lines(self.unit, self.start_line, self.end_line)


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------

class SymbolKind(Enum):
    constant = "constant"
    variable = "variable"
    type = "type"
    function = "function"


@dataclass(frozen=True)
class Symbol:
    """A top-level Go declaration subject to indexing.

    ``receiver_type`` is only meaningful for ``SymbolKind.function``: empty
    for free functions, ``"*T"`` or ``"T"`` for methods on ``T``.
    """

    kind: SymbolKind
    name: str
    package_path: str
    range: SourceRange
    receiver_type: str = ""

    @property
    def is_method(self) -> bool:
        return self.kind is SymbolKind.function and bool(self.receiver_type)

    @property
    def unit(self) -> CompilationUnit | None:
        return self.range.unit

    def text(self) -> str:
        return self.range.text()

    def imports(self) -> str:
        if self.range.unit is None:
            return ""
        return self.range.unit.imports()


# ---------------------------------------------------------------------------
# Scan results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PackageResult:
    """Everything extracted from one package scan."""

    package_path: str = ""
    files: tuple[CompilationUnit, ...] = ()
    constants: tuple[Symbol, ...] = ()
    variables: tuple[Symbol, ...] = ()
    types: tuple[Symbol, ...] = ()
    functions: tuple[Symbol, ...] = ()

    @classmethod
    def from_symbols(
        cls,
        package_path: str,
        files: list[CompilationUnit],
        symbols: list[Symbol],
    ) -> PackageResult:
        by_kind: dict[SymbolKind, list[Symbol]] = {kind: [] for kind in SymbolKind}
        for sym in symbols:
            by_kind[sym.kind].append(sym)
        return cls(
            package_path=package_path,
            files=tuple(files),
            constants=tuple(by_kind[SymbolKind.constant]),
            variables=tuple(by_kind[SymbolKind.variable]),
            types=tuple(by_kind[SymbolKind.type]),
            functions=tuple(by_kind[SymbolKind.function]),
        )

    @property
    def is_empty(self) -> bool:
        return not self.files

    def symbols(self) -> Iterator[Symbol]:
        yield from self.constants
        yield from self.variables
        yield from self.types
        yield from self.functions


class ScanProgress(BaseModel):
    """Snapshot of a recursive scan's progress."""

    completed: int
    total: int
    current_package: str = ""
    percentage: float = 0.0

    @classmethod
    def snapshot(cls, completed: int, total: int, current_package: str = "") -> ScanProgress:
        percentage = 100.0 if total <= 0 else completed * 100.0 / total
        return cls(
            completed=completed,
            total=total,
            current_package=current_package,
            percentage=percentage,
        )


@dataclass
class IndexSummary:
    """Counts collected while writing index artifacts."""

    packages: int = 0
    written: int = 0
    skipped: int = 0
    failed_paths: list[str] = field(default_factory=list)
