"""Factories for pack directories and workspace configs used across tests."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import yaml

# An item is either a plain body or ``(frontmatter, body)``.
ItemSpec = Union[str, Tuple[Mapping[str, Any], str]]


def markdown(frontmatter: Optional[Mapping[str, Any]], body: str) -> str:
    """Render a Markdown document with an optional YAML frontmatter block."""
    if not frontmatter:
        return body
    fm = yaml.safe_dump(dict(frontmatter), sort_keys=False, default_flow_style=False)
    return f"---\n{fm}---\n\n{body}"


def _write_items(directory: Path, items: Mapping[str, ItemSpec]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name, spec in items.items():
        if isinstance(spec, tuple):
            fm, body = spec
        else:
            fm, body = None, spec
        (directory / f"{name}.md").write_text(markdown(fm, body), encoding="utf-8")


def write_pack(
    pack_dir: Path,
    *,
    name: Optional[str] = None,
    manifest: bool = True,
    version: str = "1.0.0",
    dependencies: Iterable[str] = (),
    conflicts: Iterable[str] = (),
    targets: Any = None,
    features: Any = None,
    rules: Optional[Mapping[str, ItemSpec]] = None,
    commands: Optional[Mapping[str, ItemSpec]] = None,
    agents: Optional[Mapping[str, ItemSpec]] = None,
    skills: Optional[Mapping[str, ItemSpec]] = None,
    mcp: Optional[Mapping[str, Any]] = None,
    ignore: Optional[Iterable[str]] = None,
    models: Optional[Mapping[str, Any]] = None,
) -> Path:
    """Write a pack directory and return its path."""
    pack_dir = Path(pack_dir)
    pack_dir.mkdir(parents=True, exist_ok=True)

    if manifest:
        data: Dict[str, Any] = {"name": name or pack_dir.name, "version": version}
        if dependencies:
            data["dependencies"] = list(dependencies)
        if conflicts:
            data["conflicts"] = list(conflicts)
        if targets is not None:
            data["targets"] = targets
        if features is not None:
            data["features"] = features
        (pack_dir / "pack.yaml").write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    if rules:
        _write_items(pack_dir / "rules", rules)
    if commands:
        _write_items(pack_dir / "commands", commands)
    if agents:
        _write_items(pack_dir / "agents", agents)
    if skills:
        for skill_name, spec in skills.items():
            skill_dir = pack_dir / "skills" / skill_name
            skill_dir.mkdir(parents=True, exist_ok=True)
            fm, body = spec if isinstance(spec, tuple) else (None, spec)
            (skill_dir / "SKILL.md").write_text(markdown(fm, body), encoding="utf-8")
    if mcp is not None:
        (pack_dir / "mcp.json").write_text(json.dumps({"mcpServers": dict(mcp)}, indent=2), encoding="utf-8")
    if ignore is not None:
        (pack_dir / "ignore").write_text("\n".join(ignore) + "\n", encoding="utf-8")
    if models is not None:
        (pack_dir / "models.yaml").write_text(yaml.safe_dump(dict(models), sort_keys=False), encoding="utf-8")
    return pack_dir


def write_workspace(project_root: Path, **config: Any) -> Path:
    """Write ``agentpacks.yaml``; keyword names are the config keys verbatim."""
    path = Path(project_root) / "agentpacks.yaml"
    path.write_text(yaml.safe_dump(config, sort_keys=False), encoding="utf-8")
    return path


def read_tree(root: Path) -> Dict[str, str]:
    """Every file below ``root`` as ``{posix_relpath: text}``."""
    return {
        p.relative_to(root).as_posix(): p.read_text(encoding="utf-8")
        for p in sorted(Path(root).rglob("*"))
        if p.is_file()
    }


__all__ = ["markdown", "write_pack", "write_workspace", "read_tree"]
