"""Pack data model.

A pack is a named bundle of AI-assistant configuration. Everything here is
plain data rebuilt on every invocation; loading lives in ``loader``, graph
resolution in ``resolver`` and cross-pack merging in ``merger``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from agentpacks.core.models.config import ModelsConfig
from agentpacks.core.schemas import validate_payload

WILDCARD = "*"

FEATURE_IDS: Tuple[str, ...] = ("rules", "commands", "agents", "skills", "mcp", "ignore", "models")

# ``None`` means "everything" (wildcard); a tuple is an explicit allow-list.
AllowList = Optional[Tuple[str, ...]]


def parse_allow_list(value: Any) -> AllowList:
    """Normalize ``"*"``, ``None``, a comma string or a list into an ``AllowList``."""
    if value is None or value == WILDCARD:
        return None
    if isinstance(value, str):
        items = [v.strip() for v in value.split(",") if v.strip()]
    else:
        items = [str(v).strip() for v in value if str(v).strip()]
    if WILDCARD in items:
        return None
    return tuple(dict.fromkeys(items))


def allows(allow: AllowList, item: str) -> bool:
    return allow is None or item in allow


def intersect_allow(a: AllowList, b: AllowList) -> AllowList:
    if a is None:
        return b
    if b is None:
        return a
    return tuple(x for x in a if x in b)


def normalize_feature_ids(value: Any) -> List[str]:
    """Expand a feature allow-list to known feature ids, in canonical order.

    Unknown ids are dropped silently so newer configs keep working.
    """
    allow = parse_allow_list(value)
    return [f for f in FEATURE_IDS if allows(allow, f)]


@dataclass
class PackManifest:
    name: str
    version: str = "0.0.0"
    description: str = ""
    dependencies: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    targets: AllowList = None
    features: AllowList = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, source: str = "") -> "PackManifest":
        """Validate and parse a raw manifest.

        Raises:
            SchemaValidationError: If ``data`` violates the pack schema
        """
        validate_payload(dict(data), "pack", source=source)
        return cls(
            name=str(data["name"]),
            version=str(data.get("version") or "0.0.0"),
            description=str(data.get("description") or ""),
            dependencies=list(dict.fromkeys(data.get("dependencies") or [])),
            conflicts=list(dict.fromkeys(data.get("conflicts") or [])),
            targets=parse_allow_list(data.get("targets")),
            features=parse_allow_list(data.get("features")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "dependencies": list(self.dependencies),
            "conflicts": list(self.conflicts),
            "targets": WILDCARD if self.targets is None else list(self.targets),
            "features": WILDCARD if self.features is None else list(self.features),
        }


@dataclass
class FeatureItem:
    """A named Markdown item contributed by a pack.

    ``frontmatter`` is kept verbatim so targets can read their own blocks
    (``cursor: {...}``, ``claudecode: {...}``); ``targets`` is the resolved
    applicability list (``None`` = every target).
    """

    kind: ClassVar[str] = ""

    name: str
    pack_name: str
    content: str
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    targets: AllowList = None
    source_path: Optional[Path] = None

    @property
    def description(self) -> Optional[str]:
        value = self.frontmatter.get("description")
        return str(value) if value is not None else None

    def applies_to(self, target_id: str) -> bool:
        return allows(self.targets, target_id)

    def target_block(self, target_id: str) -> Dict[str, Any]:
        block = self.frontmatter.get(target_id)
        return dict(block) if isinstance(block, Mapping) else {}


@dataclass
class Rule(FeatureItem):
    kind: ClassVar[str] = "rule"

    root: bool = False

    @property
    def globs(self) -> List[str]:
        raw = self.frontmatter.get("globs")
        if raw is None:
            return []
        if isinstance(raw, str):
            return [g.strip() for g in raw.split(",") if g.strip()]
        return [str(g) for g in raw]


@dataclass
class Command(FeatureItem):
    kind: ClassVar[str] = "command"


@dataclass
class Agent(FeatureItem):
    kind: ClassVar[str] = "agent"

    def model_hint(self, target_id: Optional[str] = None) -> Optional[str]:
        """Inline model hint: ``<target>.model`` first, then ``model``."""
        if target_id:
            hinted = self.target_block(target_id).get("model")
            if hinted:
                return str(hinted)
        value = self.frontmatter.get("model")
        return str(value) if value else None


@dataclass
class Skill(FeatureItem):
    kind: ClassVar[str] = "skill"


@dataclass
class McpServerEntry:
    """One MCP server: ``command``/``args``/``env`` (local) or ``url`` (remote)."""

    name: str
    config: Dict[str, Any]
    pack_name: str = ""

    @property
    def is_remote(self) -> bool:
        return "url" in self.config and "command" not in self.config

    @property
    def command(self) -> Optional[str]:
        return self.config.get("command")

    @property
    def url(self) -> Optional[str]:
        return self.config.get("url")

    @property
    def args(self) -> List[str]:
        return list(self.config.get("args") or [])

    @property
    def env(self) -> Dict[str, str]:
        return dict(self.config.get("env") or {})


@dataclass
class LoadedPack:
    manifest: PackManifest
    path: Optional[Path] = None
    rules: List[Rule] = field(default_factory=list)
    commands: List[Command] = field(default_factory=list)
    agents: List[Agent] = field(default_factory=list)
    skills: List[Skill] = field(default_factory=list)
    mcp_servers: List[McpServerEntry] = field(default_factory=list)
    ignore_patterns: List[str] = field(default_factory=list)
    models: Optional[ModelsConfig] = None

    @property
    def name(self) -> str:
        return self.manifest.name


@dataclass
class MergedFeatures:
    """The deduplicated feature set produced by the merger."""

    rules: List[Rule] = field(default_factory=list)
    commands: List[Command] = field(default_factory=list)
    agents: List[Agent] = field(default_factory=list)
    skills: List[Skill] = field(default_factory=list)
    mcp_servers: Dict[str, McpServerEntry] = field(default_factory=dict)
    ignore_patterns: List[str] = field(default_factory=list)
    models: Optional[ModelsConfig] = None

    def counts(self) -> Dict[str, int]:
        return {
            "rules": len(self.rules),
            "commands": len(self.commands),
            "agents": len(self.agents),
            "skills": len(self.skills),
            "mcp": len(self.mcp_servers),
            "ignore": len(self.ignore_patterns),
            "models": 0 if self.models is None else 1,
        }


__all__ = [
    "WILDCARD",
    "FEATURE_IDS",
    "AllowList",
    "parse_allow_list",
    "allows",
    "intersect_allow",
    "normalize_feature_ids",
    "PackManifest",
    "FeatureItem",
    "Rule",
    "Command",
    "Agent",
    "Skill",
    "McpServerEntry",
    "LoadedPack",
    "MergedFeatures",
]
