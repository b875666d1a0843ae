"""Filesystem seam used by discovery, loading and emission."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class FileEntry:
    """One directory listing entry."""

    name: str
    is_dir: bool


@runtime_checkable
class FileSystem(Protocol):
    """Read/write contract consumed by the scanner and the emitter.

    Implementations must be safe for concurrent reads.  All methods raise
    ``OSError`` on failure.
    """

    def list_dir(self, path: str) -> list[FileEntry]:
        ...

    def read_text(self, path: str) -> str:
        ...

    def write_text(self, path: str, content: str) -> None:
        ...

    def make_dirs(self, path: str) -> None:
        ...


class LocalFileSystem:
    """``FileSystem`` backed by the local disk via :mod:`pathlib`."""

    def list_dir(self, path: str) -> list[FileEntry]:
        return [
            FileEntry(name=child.name, is_dir=child.is_dir() and not child.is_symlink())
            for child in Path(path).iterdir()
        ]

    def read_text(self, path: str) -> str:
        # "\r" must survive the read; slicing strips it.
        return Path(path).read_bytes().decode("utf-8")

    def write_text(self, path: str, content: str) -> None:
        Path(path).write_bytes(content.encode("utf-8"))

    def make_dirs(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)
