"""Package discovery -- walks the source tree and lists candidate packages."""

from __future__ import annotations

import logging
import os

from .fs import FileSystem
from .loader import is_go_source

logger = logging.getLogger(__name__)

# Directories never treated as packages (hidden directories are skipped too).
SKIP_DIRS: set[str] = {
    "vendor",
    # Version control
    ".git", ".hg", ".svn", ".bzr",
    # Editor configuration
    ".idea", ".vscode",
    # Go test fixtures
    "testdata",
}


def _should_skip(name: str) -> bool:
    return name in SKIP_DIRS or name.startswith(".")


def _normalize(root_path: str) -> str:
    parts = [p for p in root_path.replace("\\", "/").split("/") if p and p != "."]
    return "/".join(parts)


def discover_packages(fs: FileSystem, source_root: str, root_path: str = "") -> list[str]:
    """Return every candidate package path under *root_path*.

    Paths are relative to *source_root* with forward slashes; ``""`` is the
    source root itself.  The root comes first, then subdirectories depth
    first in sorted order.  A directory is a candidate when it holds Go
    source or has a candidate below it, so deeper packages keep a
    continuous chain of parents.  The root is listed whenever it can be
    read; directories that cannot be listed are dropped.
    """
    root = _normalize(root_path)
    discovered: list[str] = []
    if _walk(fs, source_root, root, discovered) is None:
        return []
    if not discovered:
        discovered.append(root)
    return discovered


def _walk(fs: FileSystem, source_root: str, rel: str, discovered: list[str]) -> bool | None:
    """Append the candidates of *rel* in pre-order.

    Returns whether *rel* itself was kept, or ``None`` when it cannot be
    listed.
    """
    abs_dir = os.path.join(source_root, *rel.split("/")) if rel else source_root
    try:
        entries = fs.list_dir(abs_dir)
    except OSError as exc:
        logger.debug("Cannot list %s, skipping: %s", abs_dir, exc)
        return None
    position = len(discovered)
    has_go = any(not e.is_dir and is_go_source(e.name) for e in entries)
    kept_child = False
    for name in sorted(e.name for e in entries if e.is_dir and not _should_skip(e.name)):
        if _walk(fs, source_root, f"{rel}/{name}" if rel else name, discovered):
            kept_child = True
    if has_go or kept_child:
        discovered.insert(position, rel)
        return True
    return False
