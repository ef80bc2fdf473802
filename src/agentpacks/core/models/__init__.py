"""Model configuration: parsing, cross-pack merge, profile resolution."""
from __future__ import annotations

from .config import (
    SECRET_PATTERNS,
    AgentModel,
    ModelOverlay,
    ModelProfile,
    ModelsConfig,
    RoutingRule,
    merge_models_configs,
    scan_models_for_secrets,
)
from .guidance import render_models_guidance
from .profiles import (
    ResolvedModels,
    check_model_ids,
    resolve_agent_model,
    resolve_models,
    resolve_profile_inheritance,
)

__all__ = [
    "AgentModel",
    "ModelOverlay",
    "ModelProfile",
    "ModelsConfig",
    "RoutingRule",
    "SECRET_PATTERNS",
    "merge_models_configs",
    "scan_models_for_secrets",
    "ResolvedModels",
    "resolve_profile_inheritance",
    "resolve_models",
    "resolve_agent_model",
    "check_model_ids",
    "render_models_guidance",
]
