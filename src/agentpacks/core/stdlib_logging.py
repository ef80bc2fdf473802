from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from agentpacks.core.utils.io import ensure_directory

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Handler installed by the CLI; replaced when logging is reconfigured.
_AGENTPACKS_HANDLER: logging.Handler | None = None


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_stdlib_logging(*, level: str = "WARNING", log_path: Optional[Path] = None) -> logging.Handler:
    """Configure the ``agentpacks`` logger hierarchy for CLI use.

    Logs go to ``log_path`` when given, otherwise to stderr. Calling it again
    replaces the previously installed handler instead of stacking handlers.
    """
    global _AGENTPACKS_HANDLER

    logger = logging.getLogger("agentpacks")
    logger.setLevel(_level_from_name(level))

    if _AGENTPACKS_HANDLER is not None:
        logger.removeHandler(_AGENTPACKS_HANDLER)
        _AGENTPACKS_HANDLER.close()
        _AGENTPACKS_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        resolved = Path(log_path).resolve()
        ensure_directory(resolved.parent)
        handler = logging.FileHandler(resolved, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    _AGENTPACKS_HANDLER = handler
    return handler


def suppress_lastresort_in_json_mode() -> None:
    """Keep WARNING+ records off stderr when the CLI emits JSON.

    Without any handler, stdlib logging falls back to ``lastResort`` which
    writes to stderr; a NullHandler on the package logger prevents that.
    """
    logger = logging.getLogger("agentpacks")
    if any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        return
    logger.addHandler(logging.NullHandler())


def reset_stdlib_logging_for_tests() -> None:
    """Test-only: drop handlers installed by this module."""
    global _AGENTPACKS_HANDLER
    logger = logging.getLogger("agentpacks")
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = True
    _AGENTPACKS_HANDLER = None


__all__ = [
    "configure_stdlib_logging",
    "suppress_lastresort_in_json_mode",
    "reset_stdlib_logging_for_tests",
]
