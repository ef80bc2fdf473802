"""
agentpacks install command.

SUMMARY: Install remote pack sources and record them in the lockfile
"""
from __future__ import annotations

import argparse

from agentpacks.cli import (
    OutputFormatter,
    add_json_flag,
    add_lock_mode_flags,
    add_repo_root_flag,
    exit_code_for,
    get_repo_root,
    lock_mode_from_args,
)
from agentpacks.core.exceptions import AgentpacksError

SUMMARY = "Install remote pack sources and record them in the lockfile"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_lock_mode_flags(parser)
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    from agentpacks.core.config import load_workspace_config
    from agentpacks.core.generate import install_sources

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        config = load_workspace_config(repo_root)
        report = install_sources(repo_root, config, lock_mode_from_args(args))
    except AgentpacksError as e:
        formatter.error(e, error_code="install_error")
        return exit_code_for(e)

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 0

    if not report.outcomes:
        formatter.text("No remote sources configured.")
        return 0
    for outcome in report.outcomes:
        formatter.text(f"  {outcome.source_key}: {outcome.action} ({outcome.resolved_ref[:12]})")
    return 0
