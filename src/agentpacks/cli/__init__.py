"""
agentpacks CLI package.

Commands are auto-discovered: top-level commands live in ``cli/commands``,
command groups in domain folders (``cli/models/show.py`` →
``agentpacks models show``). Each module exposes ``SUMMARY``,
``register_args(parser)`` and ``main(args) -> int``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._args import (
    add_json_flag,
    add_lock_mode_flags,
    add_profile_arg,
    add_repo_root_flag,
    add_standard_flags,
    add_target_arg,
)
from ._output import OutputFormatter
from ._utils import (
    EXIT_FAILURE,
    EXIT_INVALID,
    EXIT_OK,
    exit_code_for,
    find_project_root,
    get_repo_root,
    lock_mode_from_args,
    split_ids,
)

__all__ = [
    # Output formatting
    "OutputFormatter",
    # Argument helpers
    "add_json_flag",
    "add_repo_root_flag",
    "add_target_arg",
    "add_profile_arg",
    "add_lock_mode_flags",
    "add_standard_flags",
    # Utilities
    "EXIT_OK",
    "EXIT_FAILURE",
    "EXIT_INVALID",
    "exit_code_for",
    "find_project_root",
    "get_repo_root",
    "lock_mode_from_args",
    "split_ids",
]
