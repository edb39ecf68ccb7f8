"""
dips.env reader.

Collection settings are plain KEY=value lines. The file is read as data,
never sourced, so values carrying shell syntax are refused outright.
"""

import re
from pathlib import Path

# Command substitution, expansion, chaining and pipes
FORBIDDEN_RE = re.compile(r'`|\$\(|\$\{|;|&&|\|')

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')
QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def _parse_line(lineno: int, line: str) -> tuple[str, str] | None:
    """One setting from one line, or None for blanks and comments."""
    line = line.strip()
    if not line or line.startswith('#'):
        return None

    line = line.removeprefix('export ').lstrip()
    key, sep, value = line.partition('=')
    if not sep:
        raise ValueError(f"Line {lineno}: Invalid syntax (no '=')")

    key = key.strip()
    if not KEY_PATTERN.match(key):
        raise ValueError(f"Line {lineno}: Invalid key '{key}'")

    value = _unquote(value.strip())
    if FORBIDDEN_RE.search(value):
        raise ValueError(f"Line {lineno}: Forbidden pattern in value for '{key}'")
    return key, value


def parse_env(text: str) -> dict[str, str]:
    """
    Parse dips.env text. Later assignments override earlier ones.

    Raises:
        ValueError: on the first malformed line
    """
    settings = {}
    for lineno, line in enumerate(text.splitlines(), 1):
        parsed = _parse_line(lineno, line)
        if parsed:
            key, value = parsed
            settings[key] = value
    return settings


def load_env(filepath: str | Path) -> dict[str, str]:
    """
    Read and parse a dips.env file.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if a line is malformed
    """
    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Env file not found: {filepath}")
    return parse_env(path.read_text(encoding="utf-8"))
