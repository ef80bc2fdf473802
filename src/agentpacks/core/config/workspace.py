"""Workspace configuration (``agentpacks.yaml``).

Precedence, highest first:

1. Environment variables ``AGENTPACKS_<key>`` (key matched case-insensitively)
2. ``agentpacks.yaml`` / ``agentpacks.yml`` at the project root
3. Built-in defaults
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from agentpacks.core.exceptions import ConfigError, SchemaValidationError
from agentpacks.core.lockfile.lock import DEFAULT_LOCKFILE_NAME
from agentpacks.core.packs.model import WILDCARD, normalize_feature_ids, parse_allow_list
from agentpacks.core.schemas import validate_payload
from agentpacks.core.utils.io import read_yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("agentpacks.yaml", "agentpacks.yml")
ENV_PREFIX = "AGENTPACKS_"

_BOOL_KEYS = {"delete"}
_LIST_KEYS = {"packs", "disabled", "baseDirs"}
_ALLOW_KEYS = {"targets", "features"}
_STR_KEYS = {"modelProfile", "lockfile"}
KNOWN_KEYS = _BOOL_KEYS | _LIST_KEYS | _ALLOW_KEYS | _STR_KEYS


@dataclass
class WorkspaceConfig:
    packs: List[str] = field(default_factory=list)
    disabled: List[str] = field(default_factory=list)
    targets: Any = WILDCARD
    features: Any = WILDCARD
    base_dirs: List[str] = field(default_factory=lambda: ["."])
    delete: bool = True
    model_profile: Optional[str] = None
    lockfile: str = DEFAULT_LOCKFILE_NAME
    path: Optional[Path] = None

    @property
    def target_ids(self) -> Optional[List[str]]:
        """Requested target ids, or ``None`` for all targets."""
        allow = parse_allow_list(self.targets)
        return None if allow is None else list(allow)

    @property
    def feature_ids(self) -> List[str]:
        return normalize_feature_ids(self.features)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, path: Optional[Path] = None) -> "WorkspaceConfig":
        return cls(
            packs=[str(p) for p in data.get("packs") or []],
            disabled=[str(p) for p in data.get("disabled") or []],
            targets=data.get("targets", WILDCARD),
            features=data.get("features", WILDCARD),
            base_dirs=[str(d) for d in data.get("baseDirs") or ["."]],
            delete=bool(data.get("delete", True)),
            model_profile=data.get("modelProfile") or None,
            lockfile=str(data.get("lockfile") or DEFAULT_LOCKFILE_NAME),
            path=path,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "packs": list(self.packs),
            "disabled": list(self.disabled),
            "targets": self.targets,
            "features": self.features,
            "baseDirs": list(self.base_dirs),
            "delete": self.delete,
            "modelProfile": self.model_profile,
            "lockfile": self.lockfile,
        }


def find_config_file(project_root: Path) -> Optional[Path]:
    for name in CONFIG_FILENAMES:
        candidate = Path(project_root) / name
        if candidate.is_file():
            return candidate
    return None


def _split_list(value: str) -> List[str]:
    s = value.strip()
    if s.startswith("[") and s.endswith("]"):
        try:
            parsed = json.loads(s)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [str(v) for v in parsed]
    return [part.strip() for part in s.split(",") if part.strip()]


def _coerce_env(key: str, value: str) -> Any:
    if key in _BOOL_KEYS:
        low = value.strip().lower()
        if low in {"true", "1", "yes", "on"}:
            return True
        if low in {"false", "0", "no", "off"}:
            return False
        raise ConfigError(f"{ENV_PREFIX}{key} must be a boolean, got {value!r}", context={"key": key})
    if key in _LIST_KEYS:
        return _split_list(value)
    if key in _ALLOW_KEYS:
        return WILDCARD if value.strip() == WILDCARD else _split_list(value)
    stripped = value.strip()
    if key == "modelProfile" and not stripped:
        return None
    return stripped


def env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    """Collect ``AGENTPACKS_*`` overrides; unknown keys are ignored."""
    canonical = {k.lower(): k for k in KNOWN_KEYS}
    out: Dict[str, Any] = {}
    for name in sorted(env):
        if not name.startswith(ENV_PREFIX):
            continue
        key = canonical.get(name[len(ENV_PREFIX):].lower())
        if key is None:
            continue
        out[key] = _coerce_env(key, env[name])
    return out


def load_workspace_config(project_root: Path, env: Optional[Mapping[str, str]] = None) -> WorkspaceConfig:
    """Load, validate and env-overlay the workspace configuration.

    Raises:
        ConfigError: If the file is not valid YAML or violates the schema
    """
    env = os.environ if env is None else env
    path = find_config_file(project_root)
    data: Dict[str, Any] = {}
    if path is not None:
        try:
            raw = read_yaml(path, default={}, raise_on_error=True)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}", context={"path": str(path)}) from e
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must contain a mapping", context={"path": str(path)})
        data = dict(raw)
    else:
        logger.debug("No workspace config in %s; using defaults", project_root)

    data.update(env_overrides(env))
    try:
        validate_payload(data, "workspace", source=str(path or project_root))
    except SchemaValidationError as e:
        raise ConfigError(str(e), context={"path": str(path) if path else None, "errors": e.errors}) from e
    return WorkspaceConfig.from_dict(data, path=path)


__all__ = [
    "CONFIG_FILENAMES",
    "ENV_PREFIX",
    "WorkspaceConfig",
    "find_config_file",
    "env_overrides",
    "load_workspace_config",
]
