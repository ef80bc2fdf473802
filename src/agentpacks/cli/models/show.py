"""
agentpacks models show command.

SUMMARY: Show resolved model assignments for a profile and target
"""
from __future__ import annotations

import argparse

from agentpacks.cli import (
    OutputFormatter,
    add_json_flag,
    add_profile_arg,
    add_repo_root_flag,
    exit_code_for,
    get_repo_root,
)
from agentpacks.core.exceptions import AgentpacksError

SUMMARY = "Show resolved model assignments for a profile and target"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_profile_arg(parser)
    parser.add_argument("--target", "-t", help="Apply this target's overrides")
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    from agentpacks.core.config import load_workspace_config
    from agentpacks.core.generate import load_enabled_packs, resolve_and_merge
    from agentpacks.core.models import check_model_ids, render_models_guidance, resolve_models

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        config = load_workspace_config(repo_root)
        _, merged = resolve_and_merge(load_enabled_packs(repo_root, config))
        models = merged.features.models
        profile = args.profile if args.profile is not None else config.model_profile
        resolved = resolve_models(models, profile, args.target)
    except AgentpacksError as e:
        formatter.error(e, error_code="models_error")
        return exit_code_for(e)

    advisories = check_model_ids(resolved)
    if formatter.json_mode:
        formatter.json_output({"models": resolved.to_dict(), "warnings": advisories})
        return 0

    if models is None:
        formatter.text("No pack defines a models configuration.")
        return 0
    for warning in advisories:
        formatter.warn(warning)
    formatter.text(render_models_guidance(resolved).rstrip("\n"))
    return 0
