"""Three-tier model resolution: base config → profile → target override.

Each layer is a partial overlay: it only replaces the fields it sets, and the
agent map is merged key by key so agents a layer does not mention keep their
previous assignment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from agentpacks.core.exceptions import ProfileResolutionError

from .config import AgentModel, ModelOverlay, ModelProfile, ModelsConfig, RoutingRule

logger = logging.getLogger(__name__)


@dataclass
class ResolvedModels:
    """Final model assignment for one generation run (and target)."""

    default: Optional[str] = None
    small: Optional[str] = None
    agents: Dict[str, AgentModel] = field(default_factory=dict)
    active_profile: Optional[str] = None
    target_id: Optional[str] = None
    profile_names: List[str] = field(default_factory=list)
    profiles: Dict[str, ModelProfile] = field(default_factory=dict)
    providers: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    routing: List[RoutingRule] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default": self.default,
            "small": self.small,
            "agents": {k: v.to_dict() for k, v in self.agents.items()},
            "activeProfile": self.active_profile,
            "targetId": self.target_id,
            "profileNames": list(self.profile_names),
            "providers": self.providers,
            "routing": [r.to_dict() for r in self.routing],
        }


def resolve_profile_inheritance(name: str, profiles: Mapping[str, ModelProfile]) -> ModelProfile:
    """Flatten the ``extends`` chain of profile ``name``.

    The child wins over its parent for ``default``/``small``/``description``;
    agent maps are merged key by key with child entries taking precedence.

    Raises:
        ProfileResolutionError: If the profile (or a parent) is not found, or
            the chain is circular
    """
    chain: List[ModelProfile] = []
    seen: List[str] = []
    current: Optional[str] = name
    while current is not None:
        if current in seen:
            cycle = " -> ".join(seen + [current])
            raise ProfileResolutionError(
                f"Circular profile inheritance: {cycle}",
                context={"profile": name, "chain": seen + [current]},
            )
        profile = profiles.get(current)
        if profile is None:
            if current == name:
                raise ProfileResolutionError(f'Profile "{name}" not found', context={"profile": name})
            raise ProfileResolutionError(
                f'Parent profile "{current}" of "{seen[-1]}" not found',
                context={"profile": name, "missing": current},
            )
        seen.append(current)
        chain.append(profile)
        current = profile.extends

    # Apply from the root ancestor down to the requested profile.
    default: Optional[str] = None
    small: Optional[str] = None
    description: Optional[str] = None
    agents: Dict[str, AgentModel] = {}
    for profile in reversed(chain):
        if profile.default is not None:
            default = profile.default
        if profile.small is not None:
            small = profile.small
        if profile.description is not None:
            description = profile.description
        agents.update(profile.agents)

    return ModelProfile(
        default=default,
        small=small,
        agents=agents,
        description=description,
        extends=chain[0].extends,
    )


def _apply_overlay(resolved: ResolvedModels, overlay: ModelOverlay) -> None:
    if overlay.default is not None:
        resolved.default = overlay.default
    if overlay.small is not None:
        resolved.small = overlay.small
    for agent_name, assignment in overlay.agents.items():
        resolved.agents[agent_name] = assignment


def resolve_models(
    models: Optional[ModelsConfig],
    active_profile: Optional[str] = None,
    target_id: Optional[str] = None,
) -> ResolvedModels:
    """Resolve base → profile → target override into a ``ResolvedModels``.

    An unknown ``active_profile`` or ``target_id`` is ignored (base values are
    kept); a broken inheritance chain raises ``ProfileResolutionError``.
    """
    models = models or ModelsConfig()
    resolved = ResolvedModels(
        default=models.default,
        small=models.small,
        agents=dict(models.agents),
        target_id=target_id,
        profile_names=list(models.profiles.keys()),
        profiles=dict(models.profiles),
        providers=models.providers,
        routing=list(models.routing),
    )

    if active_profile:
        if active_profile in models.profiles:
            _apply_overlay(resolved, resolve_profile_inheritance(active_profile, models.profiles))
            resolved.active_profile = active_profile
        else:
            logger.warning("Model profile %r not found; using base model settings", active_profile)

    if target_id and target_id in models.overrides:
        _apply_overlay(resolved, models.overrides[target_id])

    return resolved


def resolve_agent_model(
    resolved: ResolvedModels,
    agent_name: str,
    frontmatter_model: Optional[str] = None,
) -> AgentModel:
    """Final model for one agent.

    Precedence: central assignment (base/profile/override) > the agent's own
    frontmatter hint > unset.
    """
    assignment = resolved.agents.get(agent_name)
    if assignment is not None and assignment.model:
        return assignment
    if frontmatter_model:
        return AgentModel(model=frontmatter_model)
    return AgentModel()


def check_model_ids(resolved: ResolvedModels) -> List[str]:
    """Advisory warnings for model ids missing from a provider's allow-list.

    Only ``provider/model`` ids whose provider declares a ``models`` map are
    checked; anything else is left alone.
    """
    warnings: List[str] = []
    candidates: List[tuple[str, str]] = []
    if resolved.default:
        candidates.append(("default", resolved.default))
    if resolved.small:
        candidates.append(("small", resolved.small))
    for agent_name, assignment in resolved.agents.items():
        if assignment.model:
            candidates.append((f"agent {agent_name}", assignment.model))

    for label, model_id in candidates:
        if "/" not in model_id:
            continue
        provider, _, model = model_id.partition("/")
        provider_cfg = resolved.providers.get(provider)
        if not isinstance(provider_cfg, Mapping):
            continue
        allowed = provider_cfg.get("models")
        if isinstance(allowed, Mapping) and allowed and model not in allowed:
            warnings.append(
                f'Model "{model_id}" ({label}) is not listed under provider "{provider}" models.'
            )
    return warnings


__all__ = [
    "ResolvedModels",
    "resolve_profile_inheritance",
    "resolve_models",
    "resolve_agent_model",
    "check_model_ids",
]
