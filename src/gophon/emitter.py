"""Index emitter -- writes one ``.goindex`` artifact per extracted symbol."""

from __future__ import annotations

import asyncio
import logging
import os
import threading

from .fs import FileSystem, LocalFileSystem
from .loader import PackageLoader
from .models import IndexSummary, PackageResult, Symbol, SymbolKind
from .orchestrator import OnProgress, PackageScanner
from .throttle import ThrottleConfig

logger = logging.getLogger(__name__)

INDEX_SUFFIX = ".goindex"


def index_file_name(symbol: Symbol) -> str:
    """Predictable artifact name for *symbol*.

    Constants share the ``var`` prefix with variables so a lookup does not
    need to know which of the two a name is.
    """
    if symbol.kind in (SymbolKind.constant, SymbolKind.variable):
        return f"var.{symbol.name}{INDEX_SUFFIX}"
    if symbol.kind is SymbolKind.type:
        return f"type.{symbol.name}{INDEX_SUFFIX}"
    if symbol.receiver_type:
        receiver = symbol.receiver_type.lstrip("*")
        return f"method.{receiver}.{symbol.name}{INDEX_SUFFIX}"
    return f"func.{symbol.name}{INDEX_SUFFIX}"


def render_index_content(symbol: Symbol) -> str:
    """Package line, import block, then the declaration's exact source."""
    return f"package {symbol.package_path}\n{symbol.imports()}\n{symbol.text()}\n"


def relative_package_dir(package_path: str, base_module_path: str) -> str:
    """*package_path* with the module prefix removed (``""`` for the root)."""
    rel = package_path.removeprefix(base_module_path) if base_module_path else package_path
    return rel.strip("/")


class IndexEmitter:
    """Write index artifacts for scanned packages under *destination_root*.

    Failures are per artifact: a directory or file that cannot be written is
    logged and skipped, the rest of the batch continues.
    """

    def __init__(
        self,
        destination_root: str,
        base_module_path: str,
        fs: FileSystem | None = None,
    ) -> None:
        self.destination_root = destination_root
        self.base_module_path = base_module_path
        self.fs = fs if fs is not None else LocalFileSystem()
        self.summary = IndexSummary()
        self._lock = threading.Lock()

    def package_dir(self, package_path: str) -> str:
        rel = relative_package_dir(package_path, self.base_module_path)
        if not rel:
            return self.destination_root
        return os.path.join(self.destination_root, *rel.split("/"))

    def emit(self, result: PackageResult, package_url: str) -> int:
        """Write every symbol of *result*; return how many artifacts were written."""
        pkg_dir = self.package_dir(package_url)
        written = sum(1 for symbol in result.symbols() if self.write_symbol(pkg_dir, symbol))
        with self._lock:
            self.summary.packages += 1
        logger.debug("Indexed %d symbol(s) of %s into %s", written, package_url, pkg_dir)
        return written

    def write_symbol(self, pkg_dir: str, symbol: Symbol) -> bool:
        file_path = os.path.join(pkg_dir, index_file_name(symbol))
        try:
            self.fs.make_dirs(pkg_dir)
        except OSError as exc:
            logger.warning("Failed to create directory %s: %s", pkg_dir, exc)
            self._skipped(file_path)
            return False
        try:
            self.fs.write_text(file_path, render_index_content(symbol))
        except OSError as exc:
            logger.warning("Failed to write index file %s: %s", file_path, exc)
            self._skipped(file_path)
            return False
        with self._lock:
            self.summary.written += 1
        return True

    def _skipped(self, file_path: str) -> None:
        with self._lock:
            self.summary.skipped += 1
            self.summary.failed_paths.append(file_path)


async def index_source_code_async(
    root_path: str,
    base_module_path: str,
    destination_root: str,
    on_progress: OnProgress | None = None,
    *,
    source_root: str = ".",
    fs: FileSystem | None = None,
    dest_fs: FileSystem | None = None,
    loader: PackageLoader | None = None,
    throttle: ThrottleConfig | None = None,
) -> IndexSummary:
    """Scan every package under *root_path* and write its index artifacts.

    Raises ``ScanError`` if any package fails to load; artifacts that could
    not be written are counted in the returned summary instead.
    """
    scanner = PackageScanner(source_root, fs=fs, loader=loader, throttle=throttle)
    emitter = IndexEmitter(
        destination_root,
        base_module_path,
        fs=dest_fs if dest_fs is not None else scanner.fs,
    )
    await scanner.scan_async(root_path, base_module_path, emitter.emit, on_progress)
    logger.info(
        "Indexed %d package(s): %d artifact(s) written, %d skipped",
        emitter.summary.packages, emitter.summary.written, emitter.summary.skipped,
    )
    return emitter.summary


def index_source_code(
    root_path: str,
    base_module_path: str,
    destination_root: str,
    on_progress: OnProgress | None = None,
    *,
    source_root: str = ".",
    fs: FileSystem | None = None,
    dest_fs: FileSystem | None = None,
    loader: PackageLoader | None = None,
    throttle: ThrottleConfig | None = None,
) -> IndexSummary:
    """Synchronous wrapper around :func:`index_source_code_async`."""
    return asyncio.run(index_source_code_async(
        root_path,
        base_module_path,
        destination_root,
        on_progress,
        source_root=source_root,
        fs=fs,
        dest_fs=dest_fs,
        loader=loader,
        throttle=throttle,
    ))
