"""
Schema validation for dipindex.

Metadata read from a DIP table is checked against a JSON Schema shipped in
dipindex/schemas before a Proposal is built from it.
"""

import json
from functools import lru_cache
from pathlib import Path

import jsonschema
from jsonschema.exceptions import best_match
from jsonschema.protocols import Validator

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class ValidationError(Exception):
    """Metadata does not match its schema."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.message = message
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


@lru_cache(maxsize=None)
def get_validator(schema_name: str) -> Validator:
    """Validator for a named schema, built once per process.

    Raises:
        ValidationError: if the schema file is missing or not a valid schema
    """
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    if not schema_path.is_file():
        raise ValidationError(schema_name, f"Schema file not found: {schema_path}")

    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    cls = jsonschema.validators.validator_for(schema)
    try:
        cls.check_schema(schema)
    except jsonschema.SchemaError as e:
        raise ValidationError(schema_name, f"Invalid schema: {e.message}") from None
    return cls(schema)


def _error_path(error: jsonschema.ValidationError) -> str:
    return ".".join(str(p) for p in error.absolute_path) or "(root)"


def validate(data: dict, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Dictionary to validate
        schema_name: Schema name (e.g., "proposal")

    Raises:
        ValidationError: for the most relevant violation, if any
    """
    error = best_match(get_validator(schema_name).iter_errors(data))
    if error is not None:
        raise ValidationError(schema_name, error.message, _error_path(error))
