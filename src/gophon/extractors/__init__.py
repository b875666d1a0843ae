"""Go source extraction built on tree-sitter."""

from __future__ import annotations

from .go_extractor import (
    BLANK_IDENTIFIER,
    extract_declarations,
    extract_imports,
    first_error_line,
    has_ignore_constraint,
    package_name,
    parse_source,
    receiver_type,
)

__all__ = [
    "BLANK_IDENTIFIER",
    "extract_declarations",
    "extract_imports",
    "first_error_line",
    "has_ignore_constraint",
    "package_name",
    "parse_source",
    "receiver_type",
]
