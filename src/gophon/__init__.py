"""gophon - per-symbol indexes of Go source code."""

from .emitter import (  # noqa: F401 -- public re-exports
    IndexEmitter,
    index_file_name,
    index_source_code,
    index_source_code_async,
    render_index_content,
)
from .errors import GophonError, LoadError, ScanError
from .loader import GoPackageLoader, PackageLoader, canonical_package_path
from .models import (
    CompilationUnit,
    IndexSummary,
    PackageResult,
    ScanProgress,
    SourceRange,
    Symbol,
    SymbolKind,
    slice_lines,
)
from .orchestrator import PackageScanner, scan_packages_recursively
from .scanner import discover_packages
from .throttle import ThrottleConfig, load_throttle_config

__version__ = "0.1.0"

__all__ = [
    "CompilationUnit",
    "GoPackageLoader",
    "GophonError",
    "IndexEmitter",
    "IndexSummary",
    "LoadError",
    "PackageLoader",
    "PackageResult",
    "PackageScanner",
    "ScanError",
    "ScanProgress",
    "SourceRange",
    "Symbol",
    "SymbolKind",
    "ThrottleConfig",
    "canonical_package_path",
    "discover_packages",
    "index_file_name",
    "index_source_code",
    "index_source_code_async",
    "load_throttle_config",
    "render_index_content",
    "scan_packages_recursively",
    "slice_lines",
]
