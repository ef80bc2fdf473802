"""Claude Code target.

Layout::

    CLAUDE.md                    root rules
    .claude/rules/*.md           detail rules (``paths`` frontmatter from globs)
    .claude/commands/*.md
    .claude/agents/*.md          ``model`` resolved per agent
    .claude/skills/<name>/SKILL.md
    .mcp.json
    .claude/settings.json        ignore patterns as ``permissions.deny`` Read() entries
    .claude/rules/model-config.md
"""
from __future__ import annotations

from typing import Any, Dict, List

from agentpacks.core.packs.model import FEATURE_IDS, Rule

from .base import TargetOutput
from .generic import GenericTarget, TargetLayout
from .rendering import item_frontmatter, merge_json_document, render_json

SETTINGS_FILE = ".claude/settings.json"

CLAUDE_CODE_LAYOUT = TargetLayout(
    id="claudecode",
    name="Claude Code",
    features=FEATURE_IDS,
    config_dir=".claude",
    root_file="CLAUDE.md",
    rules_dir=".claude/rules",
    commands_dir=".claude/commands",
    agents_dir=".claude/agents",
    skills_dir=".claude/skills",
    mcp_file=".mcp.json",
    models_file=".claude/rules/model-config.md",
)


class ClaudeCodeTarget(GenericTarget):
    def __init__(self) -> None:
        super().__init__(CLAUDE_CODE_LAYOUT)

    def rule_frontmatter(self, rule: Rule) -> Dict[str, Any]:
        return item_frontmatter(rule, self.id, description=rule.description, paths=rule.globs or None)

    def write_ignore(self, out: TargetOutput, patterns: List[str]) -> None:
        existing = out.read(SETTINGS_FILE)
        document = merge_json_document(existing, {})
        permissions = dict(document.get("permissions") or {})
        if patterns:
            permissions["deny"] = [f"Read({pattern})" for pattern in patterns]
            document["permissions"] = permissions
            out.write(SETTINGS_FILE, render_json(document))
            return
        if existing is None or not out.delete_existing or "deny" not in permissions:
            return
        del permissions["deny"]
        if permissions:
            document["permissions"] = permissions
        else:
            del document["permissions"]
        out.save_json(SETTINGS_FILE, document)


__all__ = ["ClaudeCodeTarget", "CLAUDE_CODE_LAYOUT"]
