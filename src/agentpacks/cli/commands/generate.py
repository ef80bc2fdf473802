"""
agentpacks generate command.

SUMMARY: Resolve, merge and generate target files (or preview them with --diff)
"""
from __future__ import annotations

import argparse

from agentpacks.cli import (
    OutputFormatter,
    add_json_flag,
    add_lock_mode_flags,
    add_profile_arg,
    add_repo_root_flag,
    add_target_arg,
    exit_code_for,
    get_repo_root,
    lock_mode_from_args,
    split_ids,
)
from agentpacks.core.exceptions import AgentpacksError

SUMMARY = "Resolve, merge and generate target files (or preview them with --diff)"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_target_arg(parser)
    add_profile_arg(parser)
    parser.add_argument(
        "--diff",
        action="store_true",
        help="Preview changes as a diff without writing anything",
    )
    parser.add_argument(
        "--delete",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove generated directories before writing (default: config 'delete')",
    )
    add_lock_mode_flags(parser)
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    """Generate (or preview) every selected target."""
    from agentpacks.core.diff import format_diff, summarize_diff
    from agentpacks.core.generate import generate_workspace

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        report = generate_workspace(
            repo_root,
            targets=split_ids(args.targets),
            profile=args.profile,
            delete=args.delete,
            preview=args.diff,
            lock_mode=lock_mode_from_args(args),
        )
    except AgentpacksError as e:
        formatter.error(e, error_code="generate_error")
        return exit_code_for(e)

    if formatter.json_mode:
        formatter.json_output(report.to_dict())
        return 0

    for warning in report.warnings + report.model_warnings:
        formatter.warn(warning)
    for result in report.results:
        for warning in result.warnings:
            formatter.warn(f"{result.target_id}: {warning}")

    if report.preview:
        text = format_diff(report.diffs)
        if text:
            formatter.text(text.rstrip("\n"))
        counts = summarize_diff(report.diffs)
        formatter.text(
            f"Preview: {counts['added']} added, {counts['modified']} modified, "
            f"{counts['deleted']} deleted, {counts['unchanged']} unchanged"
        )
        return 0

    formatter.text(f"Packs: {', '.join(report.packs) or '(none)'}")
    for result in report.results:
        formatter.text(f"  {result.target_id}: {len(result.files_written)} written, {len(result.files_deleted)} deleted")
    formatter.text(f"Generated {len(report.files_written)} files.")
    return 0
