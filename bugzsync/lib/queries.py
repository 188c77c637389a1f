"""
Named query configuration.

Loads queries.yaml, a list of user-defined search shortcuts:

    queries:
      - name: My open bugs
        key: m
        criteria:
          assigned_to: me@example.org
          status: [NEW, ASSIGNED, REOPENED]
      - name: Crashers
        key: c
        criteria:
          severity: critical
          order: date

Each query is selected by its single-character key. The set is read once
and is immutable for the life of the process.
"""

import logging
from pathlib import Path

import yaml

from bugzsync.lib import validate
from bugzsync.lib.errors import ConfigError, ValidationError
from bugzsync.lib.types import NamedQuery, SearchCriteria

logger = logging.getLogger(__name__)


def load_named_queries(path: Path | None) -> tuple[NamedQuery, ...]:
    """Load and validate named queries.

    Returns an empty tuple if path is None or the file doesn't exist.

    Raises:
        ConfigError: on invalid YAML, schema violations or duplicate keys
    """
    if path is None or not path.exists():
        return ()

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from None

    if data is None:
        return ()

    try:
        validate.validate(data, "queries")
    except ValidationError as e:
        raise ConfigError(f"Invalid named queries in {path}: {e}") from None

    queries = []
    seen_keys: dict[str, str] = {}
    for i, item in enumerate(data.get("queries", [])):
        key = item["key"]
        if key in seen_keys:
            raise ConfigError(
                f"Duplicate key '{key}' in {path}: "
                f"'{seen_keys[key]}' and '{item['name']}'"
            )
        try:
            criteria = SearchCriteria.from_dict(item["criteria"])
        except TypeError as e:
            raise ConfigError(f"Query '{item['name']}' in {path}: {e}") from None
        try:
            validate.validate_criteria(criteria)
        except ValidationError as e:
            raise ConfigError(f"Query '{item['name']}' in {path}: {e}") from None

        seen_keys[key] = item["name"]
        queries.append(NamedQuery(name=item["name"], key=key, criteria=criteria))

    logger.debug(f"Loaded {len(queries)} named queries from {path}")
    return tuple(queries)


def find_query(queries: tuple[NamedQuery, ...], key: str) -> NamedQuery | None:
    """Look up a named query by its selector key."""
    for query in queries:
        if query.key == key:
            return query
    return None
