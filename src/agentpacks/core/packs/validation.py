from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from agentpacks.core.exceptions import AgentpacksError, PackValidationError, SchemaValidationError
from agentpacks.core.models.config import scan_models_for_secrets

from .loader import load_pack_dir
from .model import PackManifest


@dataclass
class ValidationIssue:
    pack: str
    code: str
    message: str
    severity: str = "error"

    def to_dict(self) -> Dict[str, Any]:
        return {"pack": self.pack, "code": self.code, "message": self.message, "severity": self.severity}


def validate_manifests(manifests: Sequence[PackManifest]) -> List[ValidationIssue]:
    """Load-time checks the dependency resolver deliberately does not make.

    Reports self-conflicts, self-dependencies, packs that both depend on and
    conflict with the same pack (directly or across a mutual dependency), and
    duplicate names.
    """
    issues: List[ValidationIssue] = []
    by_name: Dict[str, PackManifest] = {}

    for m in manifests:
        if m.name in by_name:
            issues.append(ValidationIssue(m.name, "duplicate-name", f'Pack name "{m.name}" is declared more than once'))
            continue
        by_name[m.name] = m

    for m in by_name.values():
        if m.name in m.conflicts:
            issues.append(ValidationIssue(m.name, "self-conflict", f'Pack "{m.name}" lists itself in conflicts'))
        if m.name in m.dependencies:
            issues.append(ValidationIssue(m.name, "self-dependency", f'Pack "{m.name}" lists itself in dependencies'))
        for dep in m.dependencies:
            if dep != m.name and dep in m.conflicts and dep in by_name:
                issues.append(
                    ValidationIssue(
                        m.name,
                        "dependency-conflict",
                        f'Pack "{m.name}" both depends on and conflicts with "{dep}"',
                    )
                )

    reported: set[tuple[str, str]] = set()
    for m in by_name.values():
        for dep in m.dependencies:
            other = by_name.get(dep)
            if other is None or dep == m.name or m.name not in other.dependencies:
                continue
            key = tuple(sorted((m.name, dep)))
            if key in reported:
                continue
            if dep in m.conflicts or m.name in other.conflicts:
                reported.add(key)  # type: ignore[arg-type]
                issues.append(
                    ValidationIssue(
                        m.name,
                        "dependency-conflict",
                        f'Packs "{m.name}" and "{dep}" depend on each other and declare a conflict',
                    )
                )
    return issues


def raise_for_issues(issues: Sequence[ValidationIssue]) -> None:
    errors = [i for i in issues if i.severity == "error"]
    if errors:
        raise PackValidationError(
            "Pack validation failed: " + "; ".join(i.message for i in errors),
            context={"issues": [i.to_dict() for i in errors]},
        )


def validate_pack_dir(pack_dir: Path) -> List[ValidationIssue]:
    """Full check of one pack directory for the ``validate`` command.

    Loads the pack (schema-checking manifest and models file), then applies
    the manifest checks and the models secret scan. Never raises for pack
    content problems; they come back as issues.
    """
    pack_dir = Path(pack_dir)
    name = pack_dir.name
    try:
        pack = load_pack_dir(pack_dir)
    except SchemaValidationError as e:
        return [ValidationIssue(name, "schema", err) for err in (e.errors or [str(e)])]
    except AgentpacksError as e:
        return [ValidationIssue(name, "load-error", str(e))]

    issues = validate_manifests([pack.manifest])
    if pack.models is not None:
        issues.extend(
            ValidationIssue(pack.name, "secret", warning, severity="warning")
            for warning in scan_models_for_secrets(pack.models)
        )
    for kind, items in (("rule", pack.rules), ("command", pack.commands), ("agent", pack.agents), ("skill", pack.skills)):
        for item in items:
            if not item.content.strip():
                issues.append(ValidationIssue(pack.name, "empty-item", f'{kind} "{item.name}" has no content', "warning"))
            if item.targets == ():
                issues.append(
                    ValidationIssue(
                        pack.name,
                        "no-targets",
                        f'{kind} "{item.name}" applies to no target after the manifest allow-list',
                        "warning",
                    )
                )
    return issues


def summarize(issues: Sequence[ValidationIssue], pack: Optional[str] = None) -> Dict[str, Any]:
    errors = [i for i in issues if i.severity == "error"]
    return {
        "pack": pack,
        "ok": not errors,
        "errors": len(errors),
        "warnings": len(issues) - len(errors),
        "issues": [i.to_dict() for i in issues],
    }


__all__ = ["ValidationIssue", "validate_manifests", "raise_for_issues", "validate_pack_dir", "summarize"]
