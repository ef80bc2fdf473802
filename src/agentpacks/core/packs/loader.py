"""Load packs from disk.

Pack directory layout::

    <pack>/
      pack.yaml | pack.yml | pack.json   manifest (optional; name defaults to dir name)
      rules/*.md                         rules (frontmatter: root, targets, description, globs)
      commands/*.md                      slash commands
      agents/*.md                        agent prompts (frontmatter may carry ``model``)
      skills/<name>/SKILL.md             skills
      mcp.json                           {"mcpServers": {...}}
      ignore | .aiignore                 ignore patterns, one per line
      models.yaml | models.json          model configuration

Remote references are read from their install directory under
``.agentpacks/sources``; installing them is the lockfile package's job.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import yaml

from agentpacks.core.exceptions import PackLoadError, PackValidationError
from agentpacks.core.lockfile.installer import DEFAULT_SOURCES_DIR
from agentpacks.core.lockfile.sources import SourceRef
from agentpacks.core.models.config import ModelsConfig
from agentpacks.core.utils.io import read_json, read_text, read_yaml
from agentpacks.core.utils.text import parse_frontmatter

from .model import (
    Agent,
    Command,
    FeatureItem,
    LoadedPack,
    McpServerEntry,
    PackManifest,
    Rule,
    Skill,
    allows,
    intersect_allow,
    parse_allow_list,
)

logger = logging.getLogger(__name__)

MANIFEST_NAMES = ("pack.yaml", "pack.yml", "pack.json")
MODELS_NAMES = ("models.yaml", "models.yml", "models.json")
IGNORE_NAMES = ("ignore", ".aiignore")
MCP_NAME = "mcp.json"
SKILL_FILE = "SKILL.md"

I = TypeVar("I", bound=FeatureItem)


def _read_structured(path: Path) -> Any:
    try:
        if path.suffix == ".json":
            return read_json(path)
        return read_yaml(path, default={}, raise_on_error=True)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise PackLoadError(f"Cannot parse {path}: {e}", context={"path": str(path)}) from e


def find_manifest(pack_dir: Path) -> Optional[Path]:
    for name in MANIFEST_NAMES:
        candidate = pack_dir / name
        if candidate.is_file():
            return candidate
    return None


def load_manifest(pack_dir: Path) -> PackManifest:
    """Read and validate the manifest of ``pack_dir``.

    Raises:
        PackLoadError: If the manifest cannot be parsed
        SchemaValidationError: If it violates the pack schema
    """
    path = find_manifest(pack_dir)
    data: Dict[str, Any] = {}
    if path is not None:
        raw = _read_structured(path)
        if not isinstance(raw, dict):
            raise PackLoadError(f"Pack manifest must be a mapping: {path}", context={"path": str(path)})
        data = dict(raw)
    else:
        data["name"] = pack_dir.name
    return PackManifest.from_dict(data, source=str(path or pack_dir))


def _load_item(cls: Type[I], path: Path, name: str, manifest: PackManifest) -> I:
    try:
        doc = parse_frontmatter(read_text(path))
    except ValueError as e:
        raise PackLoadError(f"{path}: {e}", context={"path": str(path)}) from e
    fm = doc.frontmatter
    targets = intersect_allow(parse_allow_list(fm.get("targets")), manifest.targets)
    item = cls(
        name=name,
        pack_name=manifest.name,
        content=doc.content.strip("\n") + "\n",
        frontmatter=fm,
        targets=targets,
        source_path=path,
    )
    if isinstance(item, Rule):
        item.root = bool(fm.get("root", False))
    return item


def _load_markdown_dir(cls: Type[I], directory: Path, manifest: PackManifest) -> List[I]:
    if not directory.is_dir():
        return []
    return [
        _load_item(cls, path, path.name[: -len(".md")], manifest)
        for path in sorted(directory.glob("*.md"))
        if path.is_file()
    ]


def _load_skills(directory: Path, manifest: PackManifest) -> List[Skill]:
    if not directory.is_dir():
        return []
    skills: List[Skill] = []
    for skill_dir in sorted(p for p in directory.iterdir() if p.is_dir()):
        skill_file = skill_dir / SKILL_FILE
        if skill_file.is_file():
            skills.append(_load_item(Skill, skill_file, skill_dir.name, manifest))
        else:
            logger.debug("Skipping %s: no %s", skill_dir, SKILL_FILE)
    return skills


def _load_mcp(pack_dir: Path, pack_name: str) -> List[McpServerEntry]:
    path = pack_dir / MCP_NAME
    if not path.is_file():
        return []
    data = _read_structured(path)
    servers = data.get("mcpServers") if isinstance(data, dict) else None
    if servers is None:
        return []
    if not isinstance(servers, dict):
        raise PackLoadError(f"'mcpServers' must be an object in {path}", context={"path": str(path)})
    entries: List[McpServerEntry] = []
    for name, config in servers.items():
        if not isinstance(config, dict) or not ("command" in config or "url" in config):
            raise PackLoadError(
                f"MCP server '{name}' in {path} needs a 'command' or a 'url'",
                context={"path": str(path), "server": name},
            )
        entries.append(McpServerEntry(name=str(name), config=dict(config), pack_name=pack_name))
    return entries


def parse_ignore_lines(text: str) -> List[str]:
    patterns: Dict[str, None] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            patterns.setdefault(stripped, None)
    return list(patterns)


def _load_ignore(pack_dir: Path) -> List[str]:
    for name in IGNORE_NAMES:
        path = pack_dir / name
        if path.is_file():
            return parse_ignore_lines(read_text(path))
    return []


def _load_models(pack_dir: Path) -> Optional[ModelsConfig]:
    for name in MODELS_NAMES:
        path = pack_dir / name
        if path.is_file():
            data = _read_structured(path)
            if not isinstance(data, dict):
                raise PackLoadError(f"Models config must be a mapping: {path}", context={"path": str(path)})
            return ModelsConfig.from_dict(data, source=str(path))
    return None


def load_pack_dir(pack_dir: Path) -> LoadedPack:
    """Load one pack directory.

    The manifest's ``targets`` narrows every item; its ``features`` decides
    which kinds are read at all.

    Raises:
        PackLoadError: If the directory is missing or a file is malformed
        SchemaValidationError: If the manifest or models file is invalid
    """
    pack_dir = Path(pack_dir)
    if not pack_dir.is_dir():
        raise PackLoadError(f"Pack directory not found: {pack_dir}", context={"path": str(pack_dir)})

    manifest = load_manifest(pack_dir)
    wanted = manifest.features
    pack = LoadedPack(manifest=manifest, path=pack_dir)
    if allows(wanted, "rules"):
        pack.rules = _load_markdown_dir(Rule, pack_dir / "rules", manifest)
    if allows(wanted, "commands"):
        pack.commands = _load_markdown_dir(Command, pack_dir / "commands", manifest)
    if allows(wanted, "agents"):
        pack.agents = _load_markdown_dir(Agent, pack_dir / "agents", manifest)
    if allows(wanted, "skills"):
        pack.skills = _load_skills(pack_dir / "skills", manifest)
    if allows(wanted, "mcp"):
        pack.mcp_servers = _load_mcp(pack_dir, manifest.name)
    if allows(wanted, "ignore"):
        pack.ignore_patterns = _load_ignore(pack_dir)
    if allows(wanted, "models"):
        pack.models = _load_models(pack_dir)

    logger.debug(
        "Loaded pack %s from %s (%d rules, %d commands, %d agents, %d skills)",
        manifest.name,
        pack_dir,
        len(pack.rules),
        len(pack.commands),
        len(pack.agents),
        len(pack.skills),
    )
    return pack


class PackLoader:
    """Resolve ``packs:`` references from the workspace config to loaded packs."""

    def __init__(self, project_root: Path, *, sources_dir: Path | str = DEFAULT_SOURCES_DIR) -> None:
        self.project_root = Path(project_root)
        sources_path = Path(sources_dir)
        self.sources_dir = sources_path if sources_path.is_absolute() else self.project_root / sources_path

    def ref_dir(self, ref: SourceRef) -> Path:
        if ref.is_remote:
            return self.sources_dir / ref.install_dir_name()
        path = Path(ref.location).expanduser()
        return path if path.is_absolute() else (self.project_root / path)

    def load_ref(self, raw: str) -> List[LoadedPack]:
        """Load the pack(s) behind one reference.

        A remote install directory holds either one pack or one pack per
        subdirectory carrying a manifest.
        """
        try:
            ref = SourceRef.parse(raw)
        except ValueError as e:
            raise PackLoadError(str(e), context={"ref": raw}) from e
        directory = self.ref_dir(ref)
        if not ref.is_remote:
            return [load_pack_dir(directory)]

        if not directory.is_dir():
            raise PackLoadError(
                f"Source {raw} is not installed (expected {directory}); run 'agentpacks install'",
                context={"ref": raw, "path": str(directory)},
            )
        if find_manifest(directory) is not None:
            return [load_pack_dir(directory)]
        children = [p for p in sorted(directory.iterdir()) if p.is_dir() and find_manifest(p) is not None]
        if not children:
            raise PackLoadError(f"No packs found in installed source {raw} ({directory})", context={"ref": raw})
        return [load_pack_dir(child) for child in children]

    def load_refs(self, refs: Sequence[str]) -> List[LoadedPack]:
        """Load every reference in order.

        Raises:
            PackValidationError: If two references yield the same pack name
        """
        packs: List[LoadedPack] = []
        origin: Dict[str, str] = {}
        for raw in refs:
            for pack in self.load_ref(raw):
                if pack.name in origin:
                    raise PackValidationError(
                        f'Duplicate pack name "{pack.name}" from {raw} (already loaded from {origin[pack.name]})',
                        context={"pack": pack.name, "refs": [origin[pack.name], raw]},
                    )
                origin[pack.name] = raw
                packs.append(pack)
        return packs


__all__ = [
    "MANIFEST_NAMES",
    "find_manifest",
    "load_manifest",
    "load_pack_dir",
    "parse_ignore_lines",
    "PackLoader",
]
