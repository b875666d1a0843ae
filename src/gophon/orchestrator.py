"""Orchestrator -- throttled, concurrent scanning of every discovered package."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable

from .errors import LoadError, ScanError
from .fs import FileSystem, LocalFileSystem
from .loader import GoPackageLoader, PackageLoader, directory_package_path
from .models import PackageResult, ScanProgress
from .scanner import discover_packages
from .throttle import ThrottleConfig, load_throttle_config

logger = logging.getLogger(__name__)

OnPackage = Callable[[PackageResult, str], None]
OnProgress = Callable[[ScanProgress], None]


class _PoolState:
    """Counters and first error shared by all workers of one scan."""

    def __init__(self, total: int) -> None:
        self.lock = threading.Lock()
        self.total = total
        self.completed = 0
        self.error: BaseException | None = None


class PackageScanner:
    """Discover packages under a root and load each of them concurrently.

    Discovery finishes before any load is dispatched, so ``total`` never
    changes once workers start.  The first load failure stops dispatch of
    further packages; packages already in flight drain before the error is
    raised.
    """

    def __init__(
        self,
        source_root: str,
        *,
        fs: FileSystem | None = None,
        loader: PackageLoader | None = None,
        throttle: ThrottleConfig | None = None,
    ) -> None:
        self.source_root = source_root
        self.fs = fs if fs is not None else LocalFileSystem()
        self.loader = loader if loader is not None else GoPackageLoader(source_root, self.fs)
        self.throttle = throttle if throttle is not None else load_throttle_config()

    def discover(self, root_path: str = "") -> list[str]:
        return discover_packages(self.fs, self.source_root, root_path)

    async def scan_async(
        self,
        root_path: str,
        base_module_path: str,
        on_package: OnPackage,
        on_progress: OnProgress | None = None,
    ) -> None:
        packages = await asyncio.to_thread(self.discover, root_path)
        total = len(packages)
        workers = max(1, min(self.throttle.max_workers, total))
        logger.info(
            "Discovered %d package(s) under %r; scanning with %d worker(s)",
            total, root_path or ".", workers,
        )

        sem = asyncio.Semaphore(workers)
        state = _PoolState(total)
        await asyncio.gather(*[
            self._scan_one(rel, base_module_path, sem, state, on_package, on_progress)
            for rel in packages
        ])

        if state.error is not None:
            raise state.error
        if on_progress is not None:
            with state.lock:
                on_progress(ScanProgress.snapshot(state.completed, total))

    def scan(
        self,
        root_path: str,
        base_module_path: str,
        on_package: OnPackage,
        on_progress: OnProgress | None = None,
    ) -> None:
        asyncio.run(self.scan_async(root_path, base_module_path, on_package, on_progress))

    async def _scan_one(
        self,
        rel: str,
        base_module_path: str,
        sem: asyncio.Semaphore,
        state: _PoolState,
        on_package: OnPackage,
        on_progress: OnProgress | None,
    ) -> None:
        """Load one package under concurrency + throttle control."""
        async with sem:
            if state.error is not None:
                return
            if self.throttle.worker_delay > 0:
                await asyncio.sleep(self.throttle.worker_delay)
            if on_progress is not None:
                with state.lock:
                    on_progress(ScanProgress.snapshot(state.completed, state.total, rel))
            try:
                await asyncio.to_thread(self._load_and_deliver, rel, base_module_path, state, on_package)
            except LoadError as exc:
                logger.error("Failed to load package %r: %s", rel or ".", exc.reason)
                self._record_error(state, ScanError(rel, exc), exc)
                return
            except Exception as exc:
                self._record_error(state, exc, exc)
                return
            if self.throttle.post_work_delay > 0:
                await asyncio.sleep(self.throttle.post_work_delay)

    def _load_and_deliver(
        self, rel: str, base_module_path: str, state: _PoolState, on_package: OnPackage
    ) -> None:
        result = self.loader.load_package(rel, base_module_path)
        with state.lock:
            if state.error is not None:
                return
            on_package(result, result.package_path or directory_package_path(base_module_path, rel))
            state.completed += 1

    @staticmethod
    def _record_error(state: _PoolState, error: BaseException, cause: BaseException) -> None:
        with state.lock:
            if state.error is None:
                if error is not cause:
                    error.__cause__ = cause
                state.error = error


def scan_packages_recursively(
    root_path: str,
    base_module_path: str,
    on_package: OnPackage,
    on_progress: OnProgress | None = None,
    *,
    source_root: str = ".",
    fs: FileSystem | None = None,
    loader: PackageLoader | None = None,
    throttle: ThrottleConfig | None = None,
) -> None:
    """Scan every package under *root_path* and report each to *on_package*.

    Raises ``ScanError`` naming the first package whose load failed.
    """
    scanner = PackageScanner(source_root, fs=fs, loader=loader, throttle=throttle)
    scanner.scan(root_path, base_module_path, on_package, on_progress)
