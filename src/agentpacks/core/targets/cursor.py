"""Cursor target.

Rules become ``.cursor/rules/<name>.mdc`` files whose frontmatter carries
``description``, ``globs`` and ``alwaysApply`` (root rules apply always).
Model guidance is itself an always-applied rule.
"""
from __future__ import annotations

from typing import Any, Dict, List

from agentpacks.core.models.guidance import render_models_guidance
from agentpacks.core.models.profiles import ResolvedModels
from agentpacks.core.packs.model import MergedFeatures, Rule

from .base import TargetOutput
from .generic import GenericTarget, TargetLayout
from .rendering import item_frontmatter, render_markdown

CURSOR_LAYOUT = TargetLayout(
    id="cursor",
    name="Cursor",
    features=("rules", "commands", "mcp", "ignore", "models"),
    config_dir=".cursor",
    rules_dir=".cursor/rules",
    rule_extension=".mdc",
    commands_dir=".cursor/commands",
    mcp_file=".cursor/mcp.json",
    ignore_file=".cursorignore",
    models_file=".cursor/rules/model-config.mdc",
)


class CursorTarget(GenericTarget):
    def __init__(self) -> None:
        super().__init__(CURSOR_LAYOUT)

    def rule_frontmatter(self, rule: Rule) -> Dict[str, Any]:
        fm: Dict[str, Any] = {
            "description": rule.description or "",
            "globs": ",".join(rule.globs) if rule.globs else "",
            "alwaysApply": bool(rule.root),
        }
        fm.update(item_frontmatter(rule, self.id))
        return fm

    def write_rules(self, out: TargetOutput, rules: List[Rule]) -> None:
        directory = self.layout.rules_dir
        for rule in rules:
            out.write(f"{directory}/{self.rule_filename(rule)}", render_markdown(self.rule_frontmatter(rule), rule.content))

    def write_models(self, out: TargetOutput, resolved: ResolvedModels, features: MergedFeatures) -> None:
        fm = {
            "description": "Model configuration for this project",
            "globs": "",
            "alwaysApply": True,
        }
        self.write_guidance(out, str(self.layout.models_file), render_markdown(fm, render_models_guidance(resolved)))


__all__ = ["CursorTarget", "CURSOR_LAYOUT"]
