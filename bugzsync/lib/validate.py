"""
Schema validation for bugzsync.

Enforces JSON Schema validation at every data boundary: search criteria
before they reach the remote source, named queries when the config is
loaded, and identifiers before they become filenames.
"""

import json
from pathlib import Path

import jsonschema

from bugzsync.lib.constants import ID_PATTERN, MAX_ID_LEN
from bugzsync.lib.errors import ValidationError
from bugzsync.lib.types import SearchCriteria


# Cache loaded schemas
_schema_cache: dict[str, dict] = {}


def _get_schemas_dir() -> Path:
    """Get path to the bundled schemas directory."""
    return Path(__file__).parent.parent / "schemas"


def _load_schema(schema_name: str) -> dict:
    """Load schema by name, with caching."""
    if schema_name not in _schema_cache:
        schema_path = _get_schemas_dir() / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise ValidationError(schema_name, f"Schema file not found: {schema_path}")
        _schema_cache[schema_name] = json.loads(schema_path.read_text())
    return _schema_cache[schema_name]


def validate(data: dict, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Dictionary to validate
        schema_name: Schema name (e.g., "search_criteria", "queries")

    Raises:
        ValidationError: If validation fails
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        raise ValidationError(schema_name, e.message, path) from None


def validate_criteria(criteria: SearchCriteria) -> None:
    """Reject criteria with out-of-enumeration severity, priority or order."""
    validate(criteria.to_dict(), "search_criteria")


def validate_id(entity_id, namespace: str = "bug") -> str:
    """
    Normalise an identifier to a string and check it is safe as a filename.

    Returns:
        The identifier as a string

    Raises:
        ValidationError: If the identifier is empty, too long or has path characters
    """
    value = str(entity_id).strip() if entity_id is not None else ""
    if not value:
        raise ValidationError(f"{namespace}_id", "Identifier is empty")
    if len(value) > MAX_ID_LEN:
        raise ValidationError(f"{namespace}_id", f"Identifier too long: {value[:20]}...")
    if not ID_PATTERN.match(value) or ".." in value:
        raise ValidationError(f"{namespace}_id", f"Invalid identifier '{value}'")
    return value
