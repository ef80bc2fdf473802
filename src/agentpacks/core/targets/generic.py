"""Layout-driven target implementation.

Most tools only differ in where files go, so one ``GenericTarget`` is
parameterized by a ``TargetLayout``. Targets with genuinely different formats
subclass it and override the relevant ``write_*`` step.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple

from agentpacks.core.exceptions import TargetError
from agentpacks.core.models.guidance import render_models_guidance
from agentpacks.core.models.profiles import ResolvedModels, resolve_agent_model, resolve_models
from agentpacks.core.packs.model import FEATURE_IDS, Agent, Command, MergedFeatures, Rule, Skill

from .base import GenerateOptions, GenerateResult, TargetDescriptor, TargetOutput
from .rendering import item_frontmatter, merge_json_document, render_json, render_lines, render_markdown

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetLayout:
    """Where a tool expects each feature kind (paths relative to the output root).

    ``None`` means the tool has no native location for that kind.
    """

    id: str
    name: str
    features: Tuple[str, ...]
    config_dir: Optional[str] = None
    root_file: Optional[str] = None
    rules_dir: Optional[str] = None
    rule_extension: str = ".md"
    commands_dir: Optional[str] = None
    command_extension: str = ".md"
    agents_dir: Optional[str] = None
    agent_extension: str = ".md"
    skills_dir: Optional[str] = None
    mcp_file: Optional[str] = None
    ignore_file: Optional[str] = None
    models_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TargetLayout":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise TargetError(f"Unknown layout keys for target {data.get('id')!r}: {', '.join(unknown)}")
        if not data.get("id") or not data.get("name"):
            raise TargetError(f"Target layout needs 'id' and 'name': {dict(data)!r}")
        values = dict(data)
        values["features"] = tuple(f for f in FEATURE_IDS if f in (data.get("features") or ()))
        return cls(**values)

    @property
    def guidance_file(self) -> Optional[str]:
        if self.models_file:
            return self.models_file
        if self.config_dir:
            return f"{self.config_dir}/model-config.md"
        return None


class GenericTarget(TargetDescriptor):
    def __init__(self, layout: TargetLayout) -> None:
        self.layout = layout
        self.id = layout.id
        self.name = layout.name
        self.supported_features = layout.features

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def managed_dirs(self, feature: str) -> List[str]:
        """Directories wiped for ``feature`` when ``delete_existing`` is set."""
        layout = self.layout
        mapping = {
            "rules": layout.rules_dir,
            "commands": layout.commands_dir,
            "agents": layout.agents_dir,
            "skills": layout.skills_dir,
        }
        directory = mapping.get(feature)
        return [directory] if directory else []

    def generate(self, options: GenerateOptions) -> GenerateResult:
        out = TargetOutput(self.id, options)
        effective = self.effective_features(options)
        features = options.features

        if options.delete_existing:
            for feature in effective:
                for directory in self.managed_dirs(feature):
                    out.delete(directory)

        resolved: Optional[ResolvedModels] = None
        if "models" in effective or "agents" in effective:
            resolved = resolve_models(features.models, options.model_profile, self.id)

        if "rules" in effective:
            self.write_rules(out, self.applicable(features.rules))
        if "commands" in effective:
            self.write_commands(out, self.applicable(features.commands))
        if "agents" in effective:
            self.write_agents(out, self.applicable(features.agents), resolved)
        if "skills" in effective:
            self.write_skills(out, self.applicable(features.skills))
        if "mcp" in effective:
            self.write_mcp(out, features)
        if "ignore" in effective:
            self.write_ignore(out, features.ignore_patterns)
        if "models" in effective:
            if features.models is not None and resolved is not None:
                self.write_models(out, resolved, features)
            else:
                self.clear_models(out)

        logger.debug(
            "Target %s: %d written, %d deleted",
            self.id,
            len(out.result.files_written),
            len(out.result.files_deleted),
        )
        return out.result

    # ------------------------------------------------------------------
    # Per-kind steps
    # ------------------------------------------------------------------

    def rule_frontmatter(self, rule: Rule) -> Dict[str, Any]:
        return item_frontmatter(rule, self.id, description=rule.description, globs=rule.globs or None)

    def rule_filename(self, rule: Rule) -> str:
        return f"{rule.name}{self.layout.rule_extension}"

    def write_rules(self, out: TargetOutput, rules: List[Rule]) -> None:
        layout = self.layout
        root_sections: List[str] = []
        for rule in rules:
            if rule.root and layout.root_file:
                root_sections.append(rule.content.strip("\n"))
            elif layout.rules_dir:
                out.write(
                    f"{layout.rules_dir}/{self.rule_filename(rule)}",
                    render_markdown(self.rule_frontmatter(rule), rule.content),
                )
            elif layout.root_file:
                title = rule.description or rule.name
                root_sections.append(f"## {title}\n\n{rule.content.strip()}")
            else:
                out.warn(f'rule "{rule.name}" has no destination in target "{self.id}"')
        if not layout.root_file:
            return
        if root_sections:
            out.write(layout.root_file, render_markdown(None, "\n\n".join(root_sections)))
        else:
            out.delete_stale(layout.root_file)

    def write_commands(self, out: TargetOutput, commands: List[Command]) -> None:
        directory = self.layout.commands_dir
        if not directory:
            return
        for command in commands:
            fm = item_frontmatter(command, self.id, description=command.description)
            out.write(
                f"{directory}/{command.name}{self.layout.command_extension}",
                render_markdown(fm, command.content),
            )

    def agent_frontmatter(self, agent: Agent, resolved: Optional[ResolvedModels]) -> Dict[str, Any]:
        model = None
        if resolved is not None:
            assignment = resolve_agent_model(resolved, agent.name, agent.model_hint(self.id))
            model = assignment.model
        else:
            model = agent.model_hint(self.id)
        fm = item_frontmatter(agent, self.id, name=agent.name, description=agent.description)
        if model:
            fm["model"] = model
        return fm

    def write_agents(self, out: TargetOutput, agents: List[Agent], resolved: Optional[ResolvedModels]) -> None:
        directory = self.layout.agents_dir
        if not directory:
            return
        for agent in agents:
            out.write(
                f"{directory}/{agent.name}{self.layout.agent_extension}",
                render_markdown(self.agent_frontmatter(agent, resolved), agent.content),
            )

    def write_skills(self, out: TargetOutput, skills: List[Skill]) -> None:
        directory = self.layout.skills_dir
        if not directory:
            return
        for skill in skills:
            fm = item_frontmatter(skill, self.id, name=skill.name, description=skill.description)
            out.write(f"{directory}/{skill.name}/SKILL.md", render_markdown(fm, skill.content))

    def mcp_document(self, features: MergedFeatures) -> Dict[str, Any]:
        return {"mcpServers": {name: dict(entry.config) for name, entry in features.mcp_servers.items()}}

    def write_mcp(self, out: TargetOutput, features: MergedFeatures) -> None:
        path = self.layout.mcp_file
        if not path:
            return
        if not features.mcp_servers:
            out.drop_json_keys(path, ("mcpServers",))
            return
        document = merge_json_document(out.read(path), self.mcp_document(features))
        out.write(path, render_json(document))

    def write_ignore(self, out: TargetOutput, patterns: List[str]) -> None:
        path = self.layout.ignore_file
        if not path:
            return
        if not patterns:
            out.delete_stale(path)
            return
        out.write(path, render_lines(patterns))

    def write_models(self, out: TargetOutput, resolved: ResolvedModels, features: MergedFeatures) -> None:
        path = self.layout.guidance_file
        if not path:
            out.warn(f'target "{self.id}" has no location for model guidance')
            return
        self.write_guidance(out, path, render_markdown(None, render_models_guidance(resolved)))

    def write_guidance(self, out: TargetOutput, path: str, content: str) -> None:
        if out.written_here(path):
            out.warn(f'rule output "{path}" is replaced by model guidance in target "{self.id}"')
        out.write(path, content)

    def clear_models(self, out: TargetOutput) -> None:
        if self.layout.guidance_file:
            out.delete_stale(self.layout.guidance_file)


__all__ = ["TargetLayout", "GenericTarget"]
