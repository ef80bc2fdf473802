"""Render resolved model settings as a human-readable Markdown document."""
from __future__ import annotations

from typing import List

from .profiles import ResolvedModels


def _fmt(value: object) -> str:
    return "-" if value is None else f"`{value}`"


def render_models_guidance(resolved: ResolvedModels) -> str:
    """Render ``resolved`` as Markdown.

    The document is informational only: it tells the assistant which models
    the project expects, it is never read back by agentpacks.
    """
    lines: List[str] = ["# Model Configuration", ""]

    if resolved.target_id:
        lines.append(f"Target: `{resolved.target_id}`")
    if resolved.active_profile:
        lines.append(f"Active profile: `{resolved.active_profile}`")
    if resolved.target_id or resolved.active_profile:
        lines.append("")

    lines.append(f"- Default model: {_fmt(resolved.default)}")
    lines.append(f"- Small model: {_fmt(resolved.small)}")
    lines.append("")

    if resolved.agents:
        lines.extend(["## Agent Assignments", "", "| Agent | Model | Temperature | Top P |", "| --- | --- | --- | --- |"])
        for name, assignment in resolved.agents.items():
            lines.append(
                f"| {name} | {_fmt(assignment.model)} | {_fmt(assignment.temperature)} | {_fmt(assignment.top_p)} |"
            )
        lines.append("")

    if resolved.profile_names:
        lines.extend(["## Available Profiles", ""])
        for name in resolved.profile_names:
            profile = resolved.profiles.get(name)
            entry = f"- `{name}`"
            if profile is not None and profile.description:
                entry += f": {profile.description}"
            if profile is not None and profile.extends:
                entry += f" (extends `{profile.extends}`)"
            lines.append(entry)
        lines.append("")

    if resolved.routing:
        lines.extend(["## Routing Rules", ""])
        for rule in resolved.routing:
            conditions = ", ".join(f"{k}={v}" for k, v in rule.when.items()) or "always"
            entry = f"- When {conditions}: use `{rule.use}`"
            if rule.description:
                entry += f" ({rule.description})"
            lines.append(entry)
        lines.append("")

    if resolved.providers:
        lines.extend(["## Providers", ""])
        for name, cfg in resolved.providers.items():
            models = sorted((cfg or {}).get("models") or {})
            suffix = f": {', '.join(models)}" if models else ""
            lines.append(f"- `{name}`{suffix}")
        lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"


__all__ = ["render_models_guidance"]
