"""Output formatting for agentpacks CLI commands (JSON or text)."""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from agentpacks.core.exceptions import AgentpacksError


class OutputFormatter:
    """Unified output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def success(self, data: Dict[str, Any], message: str, *, status: str = "success") -> None:
        """Print ``data`` as JSON in JSON mode, otherwise ``message``."""
        if self.json_mode:
            print(json.dumps({"status": status, **data}, indent=self.indent, default=str))
        else:
            print(message)

    def error(self, error: Exception, message: Optional[str] = None, *, error_code: str = "error") -> None:
        """Report an error on stderr.

        ``AgentpacksError`` instances contribute their class name and context
        to the JSON payload.
        """
        msg = message or str(error)
        if self.json_mode:
            output: Dict[str, Any] = {"error": error_code, "message": msg}
            if isinstance(error, AgentpacksError):
                payload = error.to_json_error()
                output["code"] = payload["code"]
                if payload["context"]:
                    output["context"] = payload["context"]
            print(json.dumps(output, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        print(message)

    def warn(self, message: str) -> None:
        """Warnings go to stderr in text mode; JSON callers embed them instead."""
        if not self.json_mode:
            print(f"Warning: {message}", file=sys.stderr)

    def text_kv(self, key: str, value: Any, prefix: str = "  ") -> None:
        if not self.json_mode:
            print(f"{prefix}{key}: {value}")


__all__ = ["OutputFormatter"]
