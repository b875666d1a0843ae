"""Exceptions raised by the scan pipeline."""

from __future__ import annotations


class GophonError(Exception):
    """Base class for gophon errors."""


class LoadError(GophonError):
    """A package could not be loaded (unreadable, unparsable or ambiguous)."""

    def __init__(self, package_path: str, reason: str) -> None:
        self.package_path = package_path
        self.reason = reason
        super().__init__(f"cannot load package {package_path or '.'!r}: {reason}")


class ScanError(GophonError):
    """A recursive scan stopped because one of its packages failed to load."""

    def __init__(self, package_path: str, cause: BaseException) -> None:
        self.package_path = package_path
        self.cause = cause
        super().__init__(f"failed to scan package {package_path or '.'!r}: {cause}")
