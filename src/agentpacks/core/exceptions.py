from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence


class AgentpacksError(Exception):
    """Base exception for agentpacks."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(AgentpacksError, ValueError):
    """Raised when the workspace configuration is invalid."""


class SchemaValidationError(AgentpacksError, ValueError):
    """Raised when a document fails JSON Schema validation.

    ``errors`` holds one human-readable line per violation.
    """

    def __init__(self, message: str = "", *, errors: Sequence[str] = (), context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message, context=context)
        self.errors: List[str] = list(errors)


class PackLoadError(AgentpacksError):
    """Raised when a pack reference cannot be loaded from disk."""


class PackValidationError(AgentpacksError, ValueError):
    """Raised when a pack set fails load-time validation."""


class DependencyResolutionError(AgentpacksError):
    """Raised by callers that abort on a non-ok dependency resolution."""


class ProfileResolutionError(AgentpacksError, ValueError):
    """Raised for circular or dangling model profile inheritance."""


class LockfileError(AgentpacksError):
    """Raised when the lockfile cannot be read or is malformed."""


class IntegrityError(LockfileError):
    """Raised when a payload does not match its locked integrity hash."""


class FrozenLockfileError(LockfileError):
    """Raised in frozen mode when required sources are not locked."""

    def __init__(self, message: str = "", *, missing: Sequence[str] = (), context: Mapping[str, Any] | None = None) -> None:
        ctx = dict(context or {})
        ctx.setdefault("missing", list(missing))
        super().__init__(message, context=ctx)
        self.missing: List[str] = list(missing)


class SourceResolutionError(AgentpacksError):
    """Raised when a remote source cannot be resolved or fetched."""


class TargetError(AgentpacksError, ValueError):
    """Raised for unknown or misconfigured targets."""


__all__ = [
    "AgentpacksError",
    "ConfigError",
    "SchemaValidationError",
    "PackLoadError",
    "PackValidationError",
    "DependencyResolutionError",
    "ProfileResolutionError",
    "LockfileError",
    "IntegrityError",
    "FrozenLockfileError",
    "SourceResolutionError",
    "TargetError",
]
