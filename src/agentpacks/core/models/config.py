"""Model configuration data model.

A pack may ship ``models.yaml`` (or ``models.json``) describing default model
choices, per-agent assignments, named profiles, per-target overrides,
provider options and routing rules. Parsing validates against the bundled
``models`` schema; merging across packs follows first-pack-wins per field.
"""
from __future__ import annotations

import copy
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from agentpacks.core.schemas import validate_payload


@dataclass(frozen=True)
class AgentModel:
    """Model assignment for one agent."""

    model: Optional[str] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AgentModel":
        return cls(
            model=data.get("model"),
            temperature=data.get("temperature"),
            top_p=data.get("top_p"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.model is not None:
            out["model"] = self.model
        if self.temperature is not None:
            out["temperature"] = self.temperature
        if self.top_p is not None:
            out["top_p"] = self.top_p
        return out


def _agents_from(raw: Any) -> Dict[str, AgentModel]:
    return {str(k): AgentModel.from_dict(v or {}) for k, v in (raw or {}).items()}


def _agents_to(agents: Mapping[str, AgentModel]) -> Dict[str, Any]:
    return {k: v.to_dict() for k, v in agents.items()}


@dataclass(frozen=True)
class ModelOverlay:
    """Partial model settings applied on top of a base.

    Used both for target overrides and (via ``ModelProfile``) for profiles.
    Only fields that are set participate in an overlay.
    """

    default: Optional[str] = None
    small: Optional[str] = None
    agents: Dict[str, AgentModel] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelOverlay":
        return cls(
            default=data.get("default"),
            small=data.get("small"),
            agents=_agents_from(data.get("agents")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.default is not None:
            out["default"] = self.default
        if self.small is not None:
            out["small"] = self.small
        if self.agents:
            out["agents"] = _agents_to(self.agents)
        return out


@dataclass(frozen=True)
class ModelProfile(ModelOverlay):
    """A named preset; may inherit from another profile via ``extends``."""

    description: Optional[str] = None
    extends: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModelProfile":
        return cls(
            default=data.get("default"),
            small=data.get("small"),
            agents=_agents_from(data.get("agents")),
            description=data.get("description"),
            extends=data.get("extends"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.description is not None:
            out["description"] = self.description
        if self.extends is not None:
            out["extends"] = self.extends
        out.update(super().to_dict())
        return out


@dataclass(frozen=True)
class RoutingRule:
    """Maps task context (``when``) to a profile name (``use``)."""

    when: Dict[str, str]
    use: str
    description: Optional[str] = None
    priority: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RoutingRule":
        return cls(
            when={str(k): str(v) for k, v in (data.get("when") or {}).items()},
            use=str(data["use"]),
            description=data.get("description"),
            priority=data.get("priority"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"when": dict(self.when), "use": self.use}
        if self.description is not None:
            out["description"] = self.description
        if self.priority is not None:
            out["priority"] = self.priority
        return out


@dataclass
class ModelsConfig:
    default: Optional[str] = None
    small: Optional[str] = None
    agents: Dict[str, AgentModel] = field(default_factory=dict)
    profiles: Dict[str, ModelProfile] = field(default_factory=dict)
    providers: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    routing: List[RoutingRule] = field(default_factory=list)
    overrides: Dict[str, ModelOverlay] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, source: str = "") -> "ModelsConfig":
        """Validate and parse a raw models document.

        Raises:
            SchemaValidationError: If ``data`` violates the models schema
        """
        validate_payload(dict(data), "models", source=source)
        return cls(
            default=data.get("default"),
            small=data.get("small"),
            agents=_agents_from(data.get("agents")),
            profiles={str(k): ModelProfile.from_dict(v or {}) for k, v in (data.get("profiles") or {}).items()},
            providers=copy.deepcopy(dict(data.get("providers") or {})),
            routing=[RoutingRule.from_dict(r) for r in (data.get("routing") or [])],
            overrides={str(k): ModelOverlay.from_dict(v or {}) for k, v in (data.get("overrides") or {}).items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.default is not None:
            out["default"] = self.default
        if self.small is not None:
            out["small"] = self.small
        if self.agents:
            out["agents"] = _agents_to(self.agents)
        if self.profiles:
            out["profiles"] = {k: v.to_dict() for k, v in self.profiles.items()}
        if self.providers:
            out["providers"] = copy.deepcopy(self.providers)
        if self.routing:
            out["routing"] = [r.to_dict() for r in self.routing]
        if self.overrides:
            out["overrides"] = {k: v.to_dict() for k, v in self.overrides.items()}
        return out

    def is_empty(self) -> bool:
        return not self.to_dict()


def _merge_named(
    target: Dict[str, Any],
    incoming: Mapping[str, Any],
    *,
    label: str,
    pack_name: str,
    warnings: List[str],
) -> None:
    for name, value in incoming.items():
        if name in target:
            warnings.append(f'Models {label} "{name}" from pack "{pack_name}" skipped (already defined).')
            continue
        target[name] = value


def _merge_provider(existing: Dict[str, Any], incoming: Mapping[str, Any]) -> None:
    options = incoming.get("options")
    if options:
        merged_options = dict(options)
        merged_options.update(existing.get("options") or {})
        existing["options"] = merged_options
    models = incoming.get("models")
    if models:
        existing_models = existing.setdefault("models", {})
        for model_name, model_cfg in models.items():
            existing_models.setdefault(model_name, copy.deepcopy(model_cfg))


def merge_models_configs(configs: Iterable[Tuple[str, ModelsConfig]]) -> Tuple[Optional[ModelsConfig], List[str]]:
    """Merge ``(pack_name, config)`` pairs in the order given.

    - ``default``/``small``: first pack to set the field wins
    - ``agents``/``profiles``/``overrides``: merged by name, first pack wins
    - ``providers``: deep merged; existing option keys and model entries win
    - ``routing``: additive, pack order preserved

    Returns ``(None, [])`` when no pack carried a models config.
    """
    warnings: List[str] = []
    result: Optional[ModelsConfig] = None

    for pack_name, config in configs:
        if result is None:
            result = ModelsConfig()

        if config.default is not None:
            if result.default is None:
                result.default = config.default
            else:
                warnings.append(f'Models "default" from pack "{pack_name}" skipped (already defined).')

        if config.small is not None:
            if result.small is None:
                result.small = config.small
            else:
                warnings.append(f'Models "small" from pack "{pack_name}" skipped (already defined).')

        _merge_named(result.agents, config.agents, label="agent", pack_name=pack_name, warnings=warnings)
        _merge_named(result.profiles, config.profiles, label="profile", pack_name=pack_name, warnings=warnings)
        _merge_named(
            result.overrides,
            config.overrides,
            label="override for target",
            pack_name=pack_name,
            warnings=warnings,
        )

        for provider_name, provider_cfg in config.providers.items():
            if provider_name not in result.providers:
                result.providers[provider_name] = copy.deepcopy(provider_cfg)
            else:
                _merge_provider(result.providers[provider_name], provider_cfg)

        result.routing.extend(config.routing)

    return result, warnings


SECRET_PATTERNS = [
    re.compile(r"[\"']api[_-]?key[\"']\s*:", re.IGNORECASE),
    re.compile(r"[\"']apiKey[\"']\s*:", re.IGNORECASE),
    re.compile(r"[\"']secret[\"']\s*:", re.IGNORECASE),
    re.compile(r"[\"']password[\"']\s*:", re.IGNORECASE),
    re.compile(r"[\"'](?:auth_token|access_token|bearer_token)[\"']\s*:", re.IGNORECASE),
    re.compile(r"[\"']private[_-]?key[\"']\s*:", re.IGNORECASE),
    re.compile(r"-----BEGIN\s+(RSA|EC|DSA|OPENSSH|PGP)\s+PRIVATE\s+KEY-----"),
    re.compile(r"sk-[a-zA-Z0-9]{20,}"),
    re.compile(r"Bearer\s+[a-zA-Z0-9._-]{20,}"),
]


def scan_models_for_secrets(config: ModelsConfig | Mapping[str, Any]) -> List[str]:
    """Return one warning per secret-like pattern found in a models config."""
    raw = config.to_dict() if isinstance(config, ModelsConfig) else dict(config)
    text = json.dumps(raw)
    return [
        f"Potential secret detected in models config matching pattern: {pattern.pattern}"
        for pattern in SECRET_PATTERNS
        if pattern.search(text)
    ]


__all__ = [
    "AgentModel",
    "ModelOverlay",
    "ModelProfile",
    "RoutingRule",
    "ModelsConfig",
    "merge_models_configs",
    "scan_models_for_secrets",
    "SECRET_PATTERNS",
]
