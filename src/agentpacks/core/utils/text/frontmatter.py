"""YAML frontmatter parsing utilities.

Pack rules, commands, agents and skills are Markdown files that may start with
a YAML frontmatter block delimited by ``---`` lines:

    ---
    root: true
    targets: ["*"]
    description: Project overview
    ---

    # Overview
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict

import yaml

FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


@dataclass
class ParsedDocument:
    """A Markdown document split into frontmatter and body."""

    frontmatter: Dict[str, Any]
    content: str


def parse_frontmatter(text: str) -> ParsedDocument:
    """Split ``text`` into its frontmatter mapping and body.

    Documents without frontmatter yield an empty mapping and the full text.

    Raises:
        ValueError: If the frontmatter is not valid YAML or not a mapping
    """
    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return ParsedDocument(frontmatter={}, content=text)

    try:
        parsed = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in frontmatter: {e}") from e
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Frontmatter must be a YAML mapping, got {type(parsed).__name__}")
    return ParsedDocument(frontmatter=parsed, content=text[match.end():])


def format_frontmatter(data: Dict[str, Any]) -> str:
    """Render ``data`` as a frontmatter block (keys keep insertion order)."""
    data = {k: v for k, v in data.items() if v is not None}
    if not data:
        return ""
    body = yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return f"---\n{body}---\n"


def split_frontmatter_block(text: str) -> tuple[str, str]:
    """Return ``(raw_block, rest)`` without parsing the YAML."""
    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return "", text
    block = text[: match.end()]
    if not block.endswith("\n"):
        block += "\n"
    return block, text[match.end():]


__all__ = [
    "ParsedDocument",
    "parse_frontmatter",
    "format_frontmatter",
    "split_frontmatter_block",
]
