"""Common CLI argument registration helpers."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repo-root",
        type=str,
        help="Override project root path (default: nearest directory with agentpacks.yaml)",
    )


def add_target_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--target",
        "-t",
        dest="targets",
        action="append",
        metavar="ID",
        help="Target id to generate (repeatable, or comma separated; default: config 'targets')",
    )


def add_profile_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--profile",
        "-p",
        help="Model profile to activate (default: config 'modelProfile')",
    )


def add_lock_mode_flags(parser: argparse.ArgumentParser) -> None:
    """Add mutually exclusive --frozen / --update."""
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--frozen",
        action="store_true",
        help="Fail if a remote source is not pinned in the lockfile; never re-resolve",
    )
    group.add_argument(
        "--update",
        action="store_true",
        help="Re-resolve every remote source and rewrite its lockfile entry",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Adds: --json, --repo-root"""
    add_json_flag(parser)
    add_repo_root_flag(parser)


__all__ = [
    "add_json_flag",
    "add_repo_root_flag",
    "add_target_arg",
    "add_profile_arg",
    "add_lock_mode_flags",
    "add_standard_flags",
]
