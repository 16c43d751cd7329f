"""Formatting helpers for asset responses."""

import re

NUMBER_PATTERN = re.compile(r"\d+")


def extract_number(filename: str) -> int:
    """Return the first run of digits in a filename, or 0 if there is none."""
    match = NUMBER_PATTERN.search(filename)
    if not match:
        return 0
    return int(match.group())


def join_url(base_url: str, filename: str) -> str:
    """Join a base URL and a filename with exactly one slash between them."""
    if base_url.endswith("/"):
        base_url = base_url[:-1]
    return f"{base_url}/{filename}"
