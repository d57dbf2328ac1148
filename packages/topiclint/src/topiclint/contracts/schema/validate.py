from __future__ import annotations

from typing import Any

import jsonschema
from jsonschema.exceptions import best_match

from ...core.errors import ScriptError
from ...core.exit_codes import ERR_VALIDATION
from .catalog import load_schema


def validate(schema_name: str, payload: Any) -> None:
    """Raise `ScriptError` naming the most relevant violation of `schema_name`."""
    schema = load_schema(schema_name)
    validator = jsonschema.Draft202012Validator(schema)
    error = best_match(validator.iter_errors(payload))
    if error is None:
        return
    loc = "/".join(str(part) for part in error.absolute_path) or "<root>"
    raise ScriptError(
        f"schema validation failed for {schema_name} at {loc}: {error.message}", ERR_VALIDATION, "schema_validation"
    )


def validate_self(schema_name: str, payload: dict[str, Any]) -> dict[str, Any]:
    validate(schema_name, payload)
    return payload


__all__ = ["validate", "validate_self"]
