"""Shared schema validation utilities.

agentpacks validates pack manifests, models files, the workspace config and
the lockfile with JSON Schema. Schemas are bundled as YAML files under
``agentpacks/data/schemas`` and loaded the same way everywhere.
"""
from __future__ import annotations

from typing import Any, Dict, List

from jsonschema import Draft202012Validator

from agentpacks.core.exceptions import SchemaValidationError
from agentpacks.data import read_data_yaml


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema by name (``pack`` → ``pack.schema.yaml``)."""
    filename = schema_name if schema_name.endswith(".yaml") else f"{schema_name}.schema.yaml"
    schema = read_data_yaml("schemas", filename)
    Draft202012Validator.check_schema(schema)
    return schema


def iter_schema_errors(payload: Any, schema_name: str) -> List[str]:
    """Return every violation of ``schema_name`` as ``"<path>: <message>"``."""
    validator = Draft202012Validator(load_schema(schema_name))
    errors: List[str] = []
    for err in sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path]):
        path = "/".join(str(p) for p in err.absolute_path) or "<root>"
        errors.append(f"{path}: {err.message}")
    return errors


def validate_payload(payload: Any, schema_name: str, *, source: str = "") -> None:
    """Validate ``payload`` and raise with all violations at once.

    Raises:
        SchemaValidationError: If the payload does not satisfy the schema
    """
    errors = iter_schema_errors(payload, schema_name)
    if errors:
        where = f" in {source}" if source else ""
        raise SchemaValidationError(
            f"Schema validation failed{where} ({schema_name}): " + "; ".join(errors),
            errors=errors,
            context={"schema": schema_name, "source": source},
        )


__all__ = ["load_schema", "iter_schema_errors", "validate_payload"]
