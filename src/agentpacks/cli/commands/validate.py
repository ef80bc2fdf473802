"""
agentpacks validate command.

SUMMARY: Validate pack directories, or the whole workspace when none are given
"""
from __future__ import annotations

import argparse
from pathlib import Path

from agentpacks.cli import EXIT_INVALID, OutputFormatter, add_json_flag, add_repo_root_flag, exit_code_for, get_repo_root
from agentpacks.core.exceptions import AgentpacksError

SUMMARY = "Validate pack directories, or the whole workspace when none are given"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "paths",
        nargs="*",
        help="Pack directories to validate (default: packs from agentpacks.yaml)",
    )
    add_json_flag(parser)
    add_repo_root_flag(parser)


def _validate_dirs(paths: list[Path]) -> list[dict]:
    from agentpacks.core.packs.validation import summarize, validate_pack_dir

    return [summarize(validate_pack_dir(p), pack=str(p)) for p in paths]


def _validate_workspace(repo_root: Path) -> dict:
    from agentpacks.core.config import load_workspace_config
    from agentpacks.core.generate import load_enabled_packs, resolve_and_merge

    config = load_workspace_config(repo_root)
    packs = load_enabled_packs(repo_root, config)
    resolution, merged = resolve_and_merge(packs)
    return {"packs": resolution.sorted, "warnings": merged.warnings, "ok": True}


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    if args.paths:
        reports = _validate_dirs([Path(p) for p in args.paths])
        ok = all(r["ok"] for r in reports)
        if formatter.json_mode:
            formatter.json_output({"ok": ok, "packs": reports})
        else:
            for report in reports:
                formatter.text(f"{report['pack']}: {'OK' if report['ok'] else 'INVALID'}")
                for issue in report["issues"]:
                    formatter.text(f"  [{issue['severity']}] {issue['code']}: {issue['message']}")
        return 0 if ok else EXIT_INVALID

    try:
        result = _validate_workspace(get_repo_root(args))
    except AgentpacksError as e:
        formatter.error(e, error_code="validation_error")
        return exit_code_for(e)

    if formatter.json_mode:
        formatter.json_output(result)
    else:
        for warning in result["warnings"]:
            formatter.warn(warning)
        formatter.text(f"Workspace OK: {', '.join(result['packs']) or '(no packs)'}")
    return 0
