"""Tests for three-tier model resolution (base, profile, target override)."""
from __future__ import annotations

import logging

import pytest

from agentpacks.core.exceptions import ProfileResolutionError
from agentpacks.core.models import (
    AgentModel,
    ModelsConfig,
    check_model_ids,
    resolve_agent_model,
    resolve_models,
    resolve_profile_inheritance,
)


@pytest.fixture
def layered() -> ModelsConfig:
    return ModelsConfig.from_dict(
        {
            "default": "X",
            "small": "base-small",
            "agents": {
                "planner": {"model": "base-planner", "temperature": 0.2},
                "coder": {"model": "base-coder"},
            },
            "profiles": {
                "P": {"description": "Profile P", "default": "Y", "agents": {"planner": {"model": "p-planner"}}},
            },
            "overrides": {
                "T": {"default": "Z", "agents": {"coder": {"model": "t-coder"}}},
            },
        }
    )


class TestResolveModels:
    def test_base_only(self, layered: ModelsConfig) -> None:
        resolved = resolve_models(layered)
        assert resolved.default == "X"
        assert resolved.agents["planner"].model == "base-planner"

    def test_profile_overlays_base(self, layered: ModelsConfig) -> None:
        resolved = resolve_models(layered, "P")
        assert resolved.default == "Y"
        assert resolved.active_profile == "P"

    def test_target_override_wins_over_profile(self, layered: ModelsConfig) -> None:
        resolved = resolve_models(layered, "P", "T")
        assert resolved.default == "Z"
        assert resolved.target_id == "T"

    def test_overlays_only_touch_fields_they_set(self, layered: ModelsConfig) -> None:
        resolved = resolve_models(layered, "P", "T")
        assert resolved.small == "base-small"
        assert resolved.agents["planner"].model == "p-planner"
        assert resolved.agents["coder"].model == "t-coder"

    def test_agent_map_is_shallow_merged(self, layered: ModelsConfig) -> None:
        resolved = resolve_models(layered, "P")
        assert resolved.agents["coder"] == AgentModel(model="base-coder")
        # the profile replaces the whole planner entry
        assert resolved.agents["planner"] == AgentModel(model="p-planner")

    def test_unknown_profile_keeps_base_and_logs(self, layered: ModelsConfig, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="agentpacks"):
            resolved = resolve_models(layered, "missing")
        assert resolved.default == "X"
        assert resolved.active_profile is None
        assert "missing" in caplog.text

    def test_unknown_target_is_ignored(self, layered: ModelsConfig) -> None:
        assert resolve_models(layered, None, "other").default == "X"

    def test_none_config(self) -> None:
        resolved = resolve_models(None, "P", "T")
        assert resolved.default is None
        assert resolved.agents == {}

    def test_does_not_mutate_merged_config(self, layered: ModelsConfig) -> None:
        resolve_models(layered, "P", "T")
        assert layered.default == "X"
        assert layered.agents["coder"].model == "base-coder"

    def test_passthrough_metadata(self) -> None:
        config = ModelsConfig.from_dict(
            {
                "profiles": {"fast": {"default": "a"}, "quality": {"default": "b"}},
                "providers": {"anthropic": {"options": {"timeout": 5}}},
                "routing": [{"when": {"complexity": "high"}, "use": "quality"}],
            }
        )
        resolved = resolve_models(config)
        assert resolved.profile_names == ["fast", "quality"]
        assert resolved.providers == {"anthropic": {"options": {"timeout": 5}}}
        assert [r.use for r in resolved.routing] == ["quality"]


class TestProfileInheritance:
    def test_child_overrides_parent(self) -> None:
        config = ModelsConfig.from_dict(
            {
                "profiles": {
                    "base": {"default": "base-default", "small": "base-small", "agents": {"a": {"model": "base-a"}}},
                    "child": {"extends": "base", "default": "child-default", "agents": {"b": {"model": "child-b"}}},
                }
            }
        )
        flat = resolve_profile_inheritance("child", config.profiles)
        assert flat.default == "child-default"
        assert flat.small == "base-small"
        assert set(flat.agents) == {"a", "b"}

    def test_resolve_models_follows_extends(self) -> None:
        config = ModelsConfig.from_dict(
            {
                "default": "root",
                "profiles": {"base": {"small": "tiny"}, "child": {"extends": "base"}},
            }
        )
        resolved = resolve_models(config, "child")
        assert resolved.default == "root"
        assert resolved.small == "tiny"

    def test_circular_chain(self) -> None:
        config = ModelsConfig.from_dict({"profiles": {"a": {"extends": "b"}, "b": {"extends": "a"}}})
        with pytest.raises(ProfileResolutionError, match="Circular"):
            resolve_profile_inheritance("a", config.profiles)

    def test_missing_parent(self) -> None:
        config = ModelsConfig.from_dict({"profiles": {"a": {"extends": "ghost"}}})
        with pytest.raises(ProfileResolutionError, match="not found"):
            resolve_profile_inheritance("a", config.profiles)


class TestResolveAgentModel:
    def test_central_assignment_beats_frontmatter(self) -> None:
        resolved = resolve_models(ModelsConfig.from_dict({"agents": {"planner": {"model": "central"}}}))
        assert resolve_agent_model(resolved, "planner", "inline").model == "central"

    def test_frontmatter_used_when_unassigned(self) -> None:
        resolved = resolve_models(ModelsConfig())
        assert resolve_agent_model(resolved, "planner", "inline").model == "inline"

    def test_unset(self) -> None:
        assert resolve_agent_model(resolve_models(None), "planner").model is None


class TestCheckModelIds:
    def test_flags_models_outside_provider_allow_list(self) -> None:
        config = ModelsConfig.from_dict(
            {
                "default": "anthropic/opus",
                "small": "anthropic/unknown",
                "agents": {"x": {"model": "local-model"}},
                "providers": {"anthropic": {"models": {"opus": {}}}},
            }
        )
        warnings = check_model_ids(resolve_models(config))
        assert len(warnings) == 1
        assert "anthropic/unknown" in warnings[0]

    def test_provider_without_allow_list_is_not_checked(self) -> None:
        config = ModelsConfig.from_dict({"default": "openai/anything", "providers": {"openai": {"options": {}}}})
        assert check_model_ids(resolve_models(config)) == []
