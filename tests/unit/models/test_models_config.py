"""Tests for models config parsing, secret scanning and guidance rendering."""
from __future__ import annotations

import pytest

from agentpacks.core.exceptions import SchemaValidationError
from agentpacks.core.models import ModelsConfig, render_models_guidance, resolve_models, scan_models_for_secrets


class TestModelsConfigParsing:
    def test_round_trips_through_to_dict(self) -> None:
        raw = {
            "default": "anthropic/sonnet",
            "small": "anthropic/haiku",
            "agents": {"planner": {"model": "anthropic/opus", "temperature": 0.3, "top_p": 0.9}},
            "profiles": {"fast": {"description": "Cheap", "extends": "base", "small": "x"}, "base": {}},
            "routing": [{"when": {"complexity": "low"}, "use": "fast", "priority": 1}],
            "overrides": {"cursor": {"default": "openai/gpt"}},
        }
        assert ModelsConfig.from_dict(raw).to_dict() == raw

    def test_temperature_out_of_range(self) -> None:
        with pytest.raises(SchemaValidationError) as excinfo:
            ModelsConfig.from_dict({"agents": {"a": {"model": "m", "temperature": 5}}})
        assert any("temperature" in e or "agents/a" in e for e in excinfo.value.errors)

    def test_unknown_top_level_key(self) -> None:
        with pytest.raises(SchemaValidationError):
            ModelsConfig.from_dict({"defaults": "typo"})

    def test_is_empty(self) -> None:
        assert ModelsConfig().is_empty()
        assert not ModelsConfig(default="x").is_empty()


class TestSecretScan:
    @pytest.mark.parametrize(
        "raw",
        [
            {"providers": {"p": {"options": {"api_key": "value"}}}},
            {"providers": {"p": {"options": {"password": "hunter2"}}}},
            {"providers": {"p": {"options": {"header": "Bearer abcdefghijklmnopqrstuvwxyz"}}}},
            {"default": "sk-abcdefghijklmnopqrstuvwx"},
        ],
    )
    def test_detects_secret_like_values(self, raw) -> None:
        assert scan_models_for_secrets(raw)

    def test_clean_config(self) -> None:
        config = ModelsConfig.from_dict({"default": "anthropic/sonnet", "providers": {"p": {"options": {"timeout": 3}}}})
        assert scan_models_for_secrets(config) == []


class TestGuidance:
    def test_renders_sections(self) -> None:
        config = ModelsConfig.from_dict(
            {
                "default": "anthropic/sonnet",
                "small": "anthropic/haiku",
                "agents": {"planner": {"model": "anthropic/opus", "temperature": 0.2}},
                "profiles": {"fast": {"description": "Speed first", "default": "anthropic/haiku"}},
                "routing": [{"when": {"complexity": "low"}, "use": "fast", "description": "easy tasks"}],
                "providers": {"anthropic": {"models": {"opus": {}, "haiku": {}}}},
            }
        )
        text = render_models_guidance(resolve_models(config, "fast", "cursor"))

        assert text.startswith("# Model Configuration\n")
        assert "Target: `cursor`" in text
        assert "Active profile: `fast`" in text
        assert "- Default model: `anthropic/haiku`" in text
        assert "| planner | `anthropic/opus` | `0.2` | - |" in text
        assert "- `fast`: Speed first" in text
        assert "- When complexity=low: use `fast` (easy tasks)" in text
        assert "- `anthropic`: haiku, opus" in text
        assert text.endswith("\n") and not text.endswith("\n\n")

    def test_minimal_document(self) -> None:
        text = render_models_guidance(resolve_models(None))
        assert "- Default model: -" in text
        assert "## Agent Assignments" not in text
