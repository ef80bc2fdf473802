"""Tests for loading pack directories and workspace pack references."""
from __future__ import annotations

from pathlib import Path

import pytest

from agentpacks.core.exceptions import PackLoadError, PackValidationError, SchemaValidationError
from agentpacks.core.packs.loader import PackLoader, load_pack_dir, parse_ignore_lines


class TestLoadPackDir:
    def test_loads_every_feature_kind(self, make_pack) -> None:
        path = make_pack(
            "base",
            dependencies=["core"],
            rules={
                "overview": ({"root": True, "description": "Project overview"}, "# Overview\n"),
                "style": ({"globs": ["src/**/*.py"]}, "Use black.\n"),
            },
            commands={"review": ({"description": "Review code"}, "Review the diff.\n")},
            agents={"planner": ({"model": "anthropic/opus"}, "You plan.\n")},
            skills={"testing": ({"description": "Write tests"}, "Use pytest.\n")},
            mcp={"fs": {"command": "npx", "args": ["-y", "fs"], "env": {"ROOT": "."}}},
            ignore=["# build output", "dist/", "", "dist/", "node_modules/"],
            models={"default": "anthropic/sonnet"},
        )

        pack = load_pack_dir(path)

        assert pack.name == "base"
        assert pack.manifest.dependencies == ["core"]
        assert [r.name for r in pack.rules] == ["overview", "style"]
        assert pack.rules[0].root is True
        assert pack.rules[1].root is False
        assert pack.rules[1].globs == ["src/**/*.py"]
        assert pack.commands[0].description == "Review code"
        assert pack.agents[0].model_hint() == "anthropic/opus"
        assert pack.skills[0].name == "testing"
        assert pack.mcp_servers[0].command == "npx"
        assert pack.mcp_servers[0].env == {"ROOT": "."}
        assert pack.ignore_patterns == ["dist/", "node_modules/"]
        assert pack.models is not None and pack.models.default == "anthropic/sonnet"
        assert all(item.pack_name == "base" for item in pack.rules + pack.commands)

    def test_content_excludes_frontmatter(self, make_pack) -> None:
        path = make_pack("base", rules={"r": ({"description": "d"}, "Body line\n")})
        rule = load_pack_dir(path).rules[0]
        assert rule.content == "Body line\n"
        assert rule.frontmatter == {"description": "d"}

    def test_manifest_is_optional(self, tmp_path: Path) -> None:
        pack_dir = tmp_path / "nameless"
        (pack_dir / "rules").mkdir(parents=True)
        (pack_dir / "rules" / "a.md").write_text("A\n", encoding="utf-8")
        pack = load_pack_dir(pack_dir)
        assert pack.name == "nameless"
        assert pack.manifest.version == "0.0.0"
        assert [r.name for r in pack.rules] == ["a"]

    def test_manifest_targets_narrow_items(self, make_pack) -> None:
        path = make_pack(
            "narrow",
            targets=["cursor", "claudecode"],
            rules={
                "everywhere": "All\n",
                "copilot-only": ({"targets": ["copilot", "cursor"]}, "Some\n"),
            },
        )
        rules = {r.name: r for r in load_pack_dir(path).rules}
        assert rules["everywhere"].targets == ("cursor", "claudecode")
        assert rules["copilot-only"].targets == ("cursor",)
        assert rules["copilot-only"].applies_to("cursor")
        assert not rules["copilot-only"].applies_to("copilot")

    def test_manifest_features_restrict_loaded_kinds(self, make_pack) -> None:
        path = make_pack("partial", features=["rules"], rules={"a": "A\n"}, commands={"c": "C\n"}, ignore=["x"])
        pack = load_pack_dir(path)
        assert [r.name for r in pack.rules] == ["a"]
        assert pack.commands == []
        assert pack.ignore_patterns == []

    def test_invalid_manifest_raises_schema_error(self, tmp_path: Path) -> None:
        pack_dir = tmp_path / "bad"
        pack_dir.mkdir()
        (pack_dir / "pack.yaml").write_text("name: bad\ntargets: 42\n", encoding="utf-8")
        with pytest.raises(SchemaValidationError):
            load_pack_dir(pack_dir)

    def test_present_manifest_must_name_the_pack(self, tmp_path: Path) -> None:
        pack_dir = tmp_path / "dirname"
        pack_dir.mkdir()
        (pack_dir / "pack.yaml").write_text("version: 1.0.0\n", encoding="utf-8")
        with pytest.raises(SchemaValidationError) as excinfo:
            load_pack_dir(pack_dir)
        assert any("name" in e for e in excinfo.value.errors)

    def test_mcp_server_without_command_or_url(self, make_pack) -> None:
        path = make_pack("mcp", mcp={"broken": {"args": ["x"]}})
        with pytest.raises(PackLoadError, match="broken"):
            load_pack_dir(path)

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(PackLoadError):
            load_pack_dir(tmp_path / "nope")


class TestParseIgnoreLines:
    def test_comments_blanks_and_duplicates(self) -> None:
        assert parse_ignore_lines("# c\n\n  a/  \nb\na/\n") == ["a/", "b"]


class TestPackLoader:
    def test_local_refs_load_in_order(self, project: Path, make_pack) -> None:
        make_pack("one")
        make_pack("two")
        packs = PackLoader(project).load_refs(["./packs/two", "./packs/one"])
        assert [p.name for p in packs] == ["two", "one"]

    def test_duplicate_pack_names_rejected(self, project: Path, make_pack) -> None:
        make_pack("one")
        from helpers.packs import write_pack

        write_pack(project / "elsewhere" / "copy", name="one")
        with pytest.raises(PackValidationError, match="Duplicate pack name"):
            PackLoader(project).load_refs(["./packs/one", "./elsewhere/copy"])

    def test_uninstalled_remote_ref(self, project: Path) -> None:
        with pytest.raises(PackLoadError, match="not installed"):
            PackLoader(project).load_refs(["github:acme/packs"])

    def test_installed_remote_with_several_packs(self, project: Path) -> None:
        from helpers.packs import write_pack

        install_dir = project / ".agentpacks" / "sources" / "github_acme_packs"
        write_pack(install_dir / "alpha", name="alpha")
        write_pack(install_dir / "beta", name="beta")
        packs = PackLoader(project).load_refs(["github:acme/packs@main"])
        assert [p.name for p in packs] == ["alpha", "beta"]

    def test_installed_remote_single_pack(self, project: Path) -> None:
        from helpers.packs import write_pack

        write_pack(project / ".agentpacks" / "sources" / "npm_agentpacks-base", name="npm-base")
        packs = PackLoader(project).load_refs(["npm:agentpacks-base@1.2.0"])
        assert [p.name for p in packs] == ["npm-base"]
