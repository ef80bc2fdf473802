"""
agentpacks targets command.

SUMMARY: List available targets and the features each supports
"""
from __future__ import annotations

import argparse

from agentpacks.cli import OutputFormatter, add_json_flag

SUMMARY = "List available targets and the features each supports"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    from agentpacks.core.targets import builtin_targets

    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    targets = builtin_targets()

    if formatter.json_mode:
        formatter.json_output(
            {"targets": [{"id": t.id, "name": t.name, "features": list(t.supported_features)} for t in targets]}
        )
        return 0

    width = max(len(t.id) for t in targets)
    for target in targets:
        formatter.text(f"{target.id.ljust(width)}  {target.name}  [{', '.join(target.supported_features)}]")
    return 0
