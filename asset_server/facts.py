"""Random line selection from JSON fact files (quotes, jokes).

A fact file is a JSON array of strings. It is re-read on every call; these
files are small and edited by hand while the service runs.
"""

import json
import random
from pathlib import Path


class FactFileError(RuntimeError):
    """Raised when a fact file can't produce a line."""


def load_lines(path: str) -> list:
    """Load every line from a fact file."""
    try:
        content = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise FactFileError(f"could not read file {path}: {e}") from e

    try:
        lines = json.loads(content)
    except ValueError as e:
        raise FactFileError(f"could not unmarshal JSON from {path}: {e}") from e

    if not isinstance(lines, list) or not all(isinstance(line, str) for line in lines):
        raise FactFileError(f"could not unmarshal JSON from {path}: expected a list of strings")
    return lines


def random_line(path: str) -> str:
    """Pick one line at random from a fact file."""
    lines = load_lines(path)
    if not lines:
        raise FactFileError(f"no lines found in {path}")
    return random.choice(lines)
