"""Pack source references.

A reference in ``agentpacks.yaml`` ``packs:`` is either a local directory
(``./packs/base``, ``/abs/path``, ``~/packs/x``) or a remote source:

- ``github:owner/repo[@ref][:path]`` (or the bare ``owner/repo`` shorthand)
- ``npm:package[@version]`` (scoped packages allowed: ``npm:@scope/pkg@1.2.0``)
- ``registry:name[@version]``

Remote sources are keyed in the lockfile by ``source_key``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

LOCAL = "local"
GITHUB = "github"
NPM = "npm"
REGISTRY = "registry"

REMOTE_KINDS = (GITHUB, NPM, REGISTRY)

_SHORTHAND = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+(@[^:]+)?(:.+)?$")
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def _split_version(spec: str) -> tuple[str, Optional[str]]:
    """Split ``name@version``; a leading ``@`` (npm scope) is not a separator."""
    at = spec.rfind("@")
    if at <= 0:
        return spec, None
    return spec[:at], spec[at + 1:] or None


@dataclass(frozen=True, slots=True)
class SourceRef:
    """Parsed pack source reference.

    Attributes:
        raw: The reference exactly as written
        kind: ``local``, ``github``, ``npm`` or ``registry``
        location: Local path, ``owner/repo``, package name or registry name
        ref: Requested version/branch/tag (``None`` means latest)
        path: Sub-path inside a GitHub repository
    """

    raw: str
    kind: str
    location: str
    ref: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> SourceRef:
        text = raw.strip()
        if not text:
            raise ValueError("Empty pack reference")

        if text.startswith(("./", "../", "/", "~")) or text in (".", ".."):
            return cls(raw=raw, kind=LOCAL, location=text)
        if text.startswith("file:"):
            return cls(raw=raw, kind=LOCAL, location=text[len("file:"):])

        if text.startswith(f"{GITHUB}:"):
            return cls._parse_github(raw, text[len(GITHUB) + 1:])
        if text.startswith(f"{NPM}:"):
            name, version = _split_version(text[len(NPM) + 1:])
            if not name:
                raise ValueError(f"Invalid npm reference: {raw}")
            return cls(raw=raw, kind=NPM, location=name, ref=version)
        if text.startswith(f"{REGISTRY}:"):
            name, version = _split_version(text[len(REGISTRY) + 1:])
            if not name:
                raise ValueError(f"Invalid registry reference: {raw}")
            return cls(raw=raw, kind=REGISTRY, location=name, ref=version)

        if _SHORTHAND.match(text):
            return cls._parse_github(raw, text)
        return cls(raw=raw, kind=LOCAL, location=text)

    @classmethod
    def _parse_github(cls, raw: str, spec: str) -> SourceRef:
        repo_part, _, path = spec.partition(":")
        repo, ref = _split_version(repo_part)
        if repo.count("/") != 1 or repo.startswith("/") or repo.endswith("/"):
            raise ValueError(f"Invalid GitHub reference (expected owner/repo): {raw}")
        return cls(raw=raw, kind=GITHUB, location=repo, ref=ref, path=path.strip("/") or None)

    @property
    def is_remote(self) -> bool:
        return self.kind in REMOTE_KINDS

    @property
    def requested_ref(self) -> str:
        return self.ref or "latest"

    def source_key(self) -> str:
        """Stable lockfile key; independent of the requested version."""
        if self.kind == GITHUB:
            return f"github:{self.location}" + (f":{self.path}" if self.path else "")
        if self.kind == LOCAL:
            return f"local:{self.location}"
        return f"{self.kind}:{self.location}"

    def install_dir_name(self) -> str:
        """Filesystem-safe directory name derived from ``source_key``."""
        return _UNSAFE.sub("_", self.source_key()).strip("_")


def source_key(raw: str) -> str:
    return SourceRef.parse(raw).source_key()


__all__ = [
    "LOCAL",
    "GITHUB",
    "NPM",
    "REGISTRY",
    "REMOTE_KINDS",
    "SourceRef",
    "source_key",
]
