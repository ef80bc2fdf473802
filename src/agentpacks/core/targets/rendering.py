"""Shared rendering helpers for generated files."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Mapping, Optional

from agentpacks.core.packs.model import FeatureItem
from agentpacks.core.utils.io import dumps_json
from agentpacks.core.utils.text import format_frontmatter, split_frontmatter_block

GENERATED_HEADER = "<!-- Generated by agentpacks. DO NOT EDIT. -->"
GENERATED_COMMENT = "# Generated by agentpacks. DO NOT EDIT."

# Frontmatter keys consumed by agentpacks itself, never copied to outputs.
RESERVED_KEYS = frozenset({"targets", "root"})


def render_markdown(frontmatter: Optional[Mapping[str, Any]], body: str) -> str:
    """Frontmatter (if any), then the generated header, then the body."""
    fm = format_frontmatter(dict(frontmatter or {}))
    text = body.strip("\n")
    return f"{fm}{GENERATED_HEADER}\n\n{text}\n" if text else f"{fm}{GENERATED_HEADER}\n"


def is_generated(text: str) -> bool:
    """True when ``text`` carries the agentpacks header (after any frontmatter)."""
    _, rest = split_frontmatter_block(text)
    head = rest.lstrip()
    return head.startswith(GENERATED_HEADER) or head.startswith(GENERATED_COMMENT)


def render_lines(lines: Iterable[str]) -> str:
    """Plain-text file (ignore lists) with a ``#`` header."""
    body = "\n".join(lines)
    return f"{GENERATED_COMMENT}\n{body}\n" if body else f"{GENERATED_COMMENT}\n"


def render_json(data: Any) -> str:
    # Insertion order is meaningful (server order); no header in JSON.
    return dumps_json(data, sort_keys=False)


def merge_json_document(existing_text: Optional[str], owned: Mapping[str, Any]) -> Dict[str, Any]:
    """Replace ``owned`` keys in an existing JSON object, keeping all others.

    Unparseable or non-object existing content is replaced entirely.
    """
    base: Dict[str, Any] = {}
    if existing_text:
        try:
            parsed = json.loads(existing_text)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            base = parsed
    base.update(owned)
    return base


def item_frontmatter(item: FeatureItem, target_id: str, **extra: Any) -> Dict[str, Any]:
    """Frontmatter for one item: ``extra`` first, then the target's own block."""
    fm: Dict[str, Any] = {k: v for k, v in extra.items() if v not in (None, [], {})}
    for key, value in item.target_block(target_id).items():
        if key not in RESERVED_KEYS:
            fm[key] = value
    return fm


__all__ = [
    "GENERATED_HEADER",
    "GENERATED_COMMENT",
    "render_markdown",
    "render_lines",
    "render_json",
    "is_generated",
    "merge_json_document",
    "item_frontmatter",
]
