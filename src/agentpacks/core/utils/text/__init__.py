"""Text helpers."""
from __future__ import annotations

from .frontmatter import (
    ParsedDocument,
    format_frontmatter,
    parse_frontmatter,
    split_frontmatter_block,
)

__all__ = [
    "ParsedDocument",
    "parse_frontmatter",
    "format_frontmatter",
    "split_frontmatter_block",
]
