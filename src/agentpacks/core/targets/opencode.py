"""OpenCode target.

Markdown items live under ``.opencode/``; MCP servers and resolved models go
into ``opencode.json``, whose other keys are preserved:

- ``mcp``: ``{"type": "local", "command": [cmd, *args], "environment": env}``
  or ``{"type": "remote", "url": ..., "headers": ...}``
- ``model`` / ``small_model`` / ``provider`` / ``agent`` from resolved models
"""
from __future__ import annotations

from typing import Any, Dict

from agentpacks.core.models.guidance import render_models_guidance
from agentpacks.core.models.profiles import ResolvedModels
from agentpacks.core.packs.model import FEATURE_IDS, McpServerEntry, MergedFeatures

from .base import TargetOutput
from .generic import GenericTarget, TargetLayout
from .rendering import merge_json_document, render_json, render_markdown

CONFIG_FILE = "opencode.json"
SCHEMA_URL = "https://opencode.ai/config.json"
MODEL_KEYS = ("model", "small_model", "provider", "agent")

OPENCODE_LAYOUT = TargetLayout(
    id="opencode",
    name="OpenCode",
    features=tuple(f for f in FEATURE_IDS if f != "ignore"),
    config_dir=".opencode",
    root_file="AGENTS.md",
    rules_dir=".opencode/memories",
    commands_dir=".opencode/command",
    agents_dir=".opencode/agent",
    skills_dir=".opencode/skill",
    mcp_file=CONFIG_FILE,
    models_file=".opencode/memories/model-config.md",
)


def opencode_mcp_entry(entry: McpServerEntry) -> Dict[str, Any]:
    config = entry.config
    if entry.is_remote:
        out: Dict[str, Any] = {"type": "remote", "url": entry.url}
        if config.get("headers"):
            out["headers"] = dict(config["headers"])
    else:
        out = {"type": "local", "command": [entry.command, *entry.args]}
        if entry.env:
            out["environment"] = entry.env
    out["enabled"] = not config.get("disabled", False)
    return out


class OpenCodeTarget(GenericTarget):
    def __init__(self) -> None:
        super().__init__(OPENCODE_LAYOUT)

    def _update_config(self, out: TargetOutput, owned: Dict[str, Any]) -> None:
        document = merge_json_document(out.read(CONFIG_FILE), {"$schema": SCHEMA_URL})
        for key, value in owned.items():
            if value in (None, {}, []):
                document.pop(key, None)
            else:
                document[key] = value
        out.write(CONFIG_FILE, render_json(document))

    def write_mcp(self, out: TargetOutput, features: MergedFeatures) -> None:
        if not features.mcp_servers:
            out.drop_json_keys(CONFIG_FILE, ("mcp",), keep=("$schema",))
            return
        self._update_config(
            out, {"mcp": {name: opencode_mcp_entry(entry) for name, entry in features.mcp_servers.items()}}
        )

    def write_models(self, out: TargetOutput, resolved: ResolvedModels, features: MergedFeatures) -> None:
        self._update_config(
            out,
            {
                "model": resolved.default,
                "small_model": resolved.small,
                "provider": resolved.providers or None,
                "agent": {name: a.to_dict() for name, a in resolved.agents.items() if a.to_dict()} or None,
            },
        )
        self.write_guidance(out, str(self.layout.models_file), render_markdown(None, render_models_guidance(resolved)))

    def clear_models(self, out: TargetOutput) -> None:
        super().clear_models(out)
        out.drop_json_keys(CONFIG_FILE, MODEL_KEYS, keep=("$schema",))


__all__ = ["OpenCodeTarget", "OPENCODE_LAYOUT", "opencode_mcp_entry"]
