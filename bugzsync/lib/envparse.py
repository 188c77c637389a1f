"""
Safe .env file parser.

Parses the KEY=value config file without shell execution. Values that look
like shell substitutions are rejected, since BUGZ_COMMAND and friends end
up on a subprocess command line.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'&&',          # AND chaining
    r'\|',          # pipe (also catches ||)
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')

TRUE_VALUES = {"1", "true", "yes", "on"}


def load_env(filepath: Path) -> dict[str, str]:
    """
    Parse env file safely, return dict.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {path}")

    result = {}
    for lineno, line in enumerate(path.read_text().splitlines(), 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        if '=' not in line:
            raise ValueError(f"{path.name} line {lineno}: Invalid syntax (no '=')")

        key, _, value = line.partition('=')
        key = key.strip()
        value = value.strip()

        if not KEY_PATTERN.match(key):
            raise ValueError(f"{path.name} line {lineno}: Invalid key '{key}'")

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]

        for pattern in FORBIDDEN_PATTERNS:
            if re.search(pattern, value):
                raise ValueError(f"{path.name} line {lineno}: Forbidden pattern in value of {key}")

        result[key] = value

    return result


def parse_bool(value: str | None, default: bool = False) -> bool:
    """Interpret an env value as a boolean flag."""
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES
