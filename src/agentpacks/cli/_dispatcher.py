"""
Auto-discovery CLI dispatcher for agentpacks.

Scans ``cli/commands`` for top-level commands and other ``cli/`` subfolders
for command domains. Adding a command means adding one ``.py`` file.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

from agentpacks.core.exceptions import AgentpacksError
from agentpacks.core.stdlib_logging import configure_stdlib_logging, suppress_lastresort_in_json_mode

from ._output import OutputFormatter
from ._utils import EXIT_FAILURE, exit_code_for

logger = logging.getLogger(__name__)


def _command_info(module: Any, default_summary: str) -> dict[str, Any]:
    return {
        "module": module,
        "summary": getattr(module, "SUMMARY", default_summary),
        "register_args": getattr(module, "register_args", None),
        "main": getattr(module, "main", None),
    }


@lru_cache(maxsize=1)
def discover_domains() -> dict[str, Path]:
    """Domain subfolders (e.g. ``models``) holding at least one command module."""
    cli_dir = Path(__file__).parent
    domains: dict[str, Path] = {}
    for item in cli_dir.iterdir():
        if item.name == "commands" or not item.is_dir() or item.name.startswith("_"):
            continue
        if any(f.suffix == ".py" and not f.name.startswith("_") for f in item.iterdir()):
            domains[item.name] = item
    return domains


def _discover_modules(package: str, directory: Path, label: str) -> dict[str, dict[str, Any]]:
    commands: dict[str, dict[str, Any]] = {}
    if not directory.exists():
        return commands
    for item in sorted(directory.glob("*.py")):
        if item.name.startswith("_"):
            continue
        cmd_name = item.stem
        try:
            module = importlib.import_module(f"{package}.{cmd_name}")
        except ImportError as e:
            print(f"Warning: Could not import {label}{cmd_name}: {e}", file=sys.stderr)
            continue
        commands[cmd_name] = _command_info(module, f"{label}{cmd_name}")
    return commands


@lru_cache(maxsize=1)
def discover_root_commands() -> dict[str, dict[str, Any]]:
    """Top-level commands under ``cli/commands`` (no domain prefix)."""
    return _discover_modules("agentpacks.cli.commands", Path(__file__).parent / "commands", "")


@lru_cache(maxsize=8)
def discover_commands(domain: str) -> dict[str, dict[str, Any]]:
    return _discover_modules(f"agentpacks.cli.{domain}", Path(__file__).parent / domain, f"{domain} ")


def _register(subparsers: Any, name: str, info: dict[str, Any]) -> None:
    primary = name.replace("_", "-")
    aliases = [name] if primary != name else []
    cmd_parser = subparsers.add_parser(primary, aliases=aliases, help=info["summary"])
    if info["register_args"]:
        info["register_args"](cmd_parser)
    if info["main"]:
        cmd_parser.set_defaults(_func=info["main"])


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with auto-discovered domains and commands."""
    parser = argparse.ArgumentParser(
        prog="agentpacks",
        description="Compose AI-assistant configuration packs and generate files for each coding tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_get_version()}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress (INFO) to stderr")
    parser.add_argument("--debug", action="store_true", help="Log everything (DEBUG)")
    parser.add_argument("--log-file", type=Path, help="Write logs to this file instead of stderr")

    subparsers = parser.add_subparsers(dest="domain", title="commands", metavar="<command>")

    for cmd_name, cmd_info in sorted(discover_root_commands().items()):
        _register(subparsers, cmd_name, cmd_info)

    for domain_name in sorted(discover_domains()):
        domain_commands = discover_commands(domain_name)
        if not domain_commands:
            continue
        domain_parser = subparsers.add_parser(domain_name, help=f"{domain_name.title()} commands")
        cmd_subparsers = domain_parser.add_subparsers(dest="command", title="commands", metavar="<command>")
        for cmd_name, cmd_info in sorted(domain_commands.items()):
            _register(cmd_subparsers, cmd_name, cmd_info)

    return parser


def _get_version() -> str:
    from agentpacks import __version__

    return __version__


def _configure_logging(args: argparse.Namespace) -> None:
    level = "DEBUG" if args.debug else "INFO" if args.verbose else "WARNING"
    if getattr(args, "json", False) and args.log_file is None and level == "WARNING":
        suppress_lastresort_in_json_mode()
        return
    configure_stdlib_logging(level=level, log_path=args.log_file)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the agentpacks CLI.

    Returns:
        Exit code: 0 success, 1 failure, 2 invalid configuration or packs
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.domain:
        parser.print_help()
        return 0

    func = getattr(args, "_func", None)
    if func is None:
        domain_parser = parser._subparsers._group_actions[0].choices.get(args.domain)  # type: ignore[union-attr]
        if domain_parser:
            domain_parser.print_help()
        return 0

    _configure_logging(args)
    try:
        return int(func(args) or 0)
    except AgentpacksError as e:
        # Commands handle their own domain errors; this is the safety net.
        logger.debug("Unhandled agentpacks error", exc_info=True)
        OutputFormatter(json_mode=getattr(args, "json", False)).error(e, error_code="error")
        return exit_code_for(e)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
