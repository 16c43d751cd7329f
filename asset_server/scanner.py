"""One-shot directory listing and random selection.

These two helpers are the only code that touches the filesystem on behalf of
a category cache. Request handlers never call them directly.
"""

import logging
import os
import random
from typing import Sequence

logger = logging.getLogger(__name__)

# Seeded once per process from os.urandom / time
_random = random.Random()


def list_directory(path: str) -> list[str]:
    """List the regular files directly under path (names only).

    Raises OSError if the directory can't be read.
    """
    names = []
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_file():
                names.append(entry.name)
    return names


def scan_directory(path: str) -> list[str]:
    """Scan a directory, degrading to an empty list on any read error."""
    try:
        return list_directory(path)
    except OSError as e:
        logger.warning(f"Error reading dir {path}: {e}")
        return []


def pick_random(names: Sequence[str], default: str) -> str:
    """Pick one name uniformly at random, or default when there are none."""
    if not names:
        return default
    return names[_random.randrange(len(names))]
