"""Startup configuration.

Settings are resolved once at startup from, in order:
- a .env file (loaded with python-dotenv, never overriding the real environment)
- environment variables
- an optional config.yaml with a ``categories`` section
"""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.yaml"
DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"

# Names taken by service routes
RESERVED_NAMES = frozenset({"quote", "joke", "info", "health", "watch"})

# name -> (dir env key, url env key, default fallback file)
BUILTIN_CATEGORIES = {
    "gary": ("GARY_DIR", "GARYURL", "Gary76.jpg"),
    "goober": ("GOOBER_DIR", "GOOBERURL", "goober8.jpg"),
    "gully": ("GULLY_DIR", "GULLYURL", "Gully1.jpg"),
}


@dataclass
class CategorySettings:
    """A named asset group bound to one directory."""
    name: str
    directory: str
    default: str
    base_url: str = ""
    mount: str = ""

    def __post_init__(self):
        if not self.mount:
            self.mount = self.name.capitalize()

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass
class Settings:
    """Resolved service configuration."""
    categories: Dict[str, CategorySettings] = field(default_factory=dict)
    quotes_file: str = ""
    jokes_file: str = ""
    index_file: str = ""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    def to_dict(self) -> dict:
        data = asdict(self)
        data["categories"] = {name: asdict(c) for name, c in self.categories.items()}
        return data


def _parse_port(value: Optional[str]) -> int:
    if not value:
        return DEFAULT_PORT
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid PORT '{value}', using {DEFAULT_PORT}")
        return DEFAULT_PORT


def _builtin_categories(env) -> Dict[str, CategorySettings]:
    categories = {}
    for name, (dir_key, url_key, default) in BUILTIN_CATEGORIES.items():
        categories[name] = CategorySettings(
            name=name,
            directory=env.get(dir_key, ""),
            default=default,
            base_url=env.get(url_key, ""),
        )
    return categories


def load_config_file(path: Path) -> dict:
    """Load the categories section of a YAML config file.

    Returns an empty dict if the file is missing or unusable.
    """
    if not path.exists():
        logger.debug(f"No config file found at {path}")
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config file {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"{path} exists but is not a mapping")
        return {}

    categories = data.get("categories") or {}
    if not isinstance(categories, dict):
        logger.warning(f"{path} has a 'categories' section that is not a mapping")
        return {}
    return categories


def _value(entry: dict, key: str, fallback: str) -> str:
    """Read a string field, treating a missing or null value as unset."""
    value = entry.get(key)
    if value is None:
        return fallback
    return str(value)


def _merge_categories(categories: Dict[str, CategorySettings], overrides: dict):
    for name, entry in overrides.items():
        name = str(name).lower()
        if name in RESERVED_NAMES:
            logger.warning(f"Category name '{name}' is reserved, skipping")
            continue
        entry = entry or {}
        if not isinstance(entry, dict):
            logger.warning(f"Category '{name}' config is not a mapping, skipping")
            continue

        current = categories.get(name)
        categories[name] = CategorySettings(
            name=name,
            directory=_value(entry, "dir", current.directory if current else ""),
            default=_value(entry, "default", current.default if current else ""),
            base_url=_value(entry, "url", current.base_url if current else ""),
            mount=_value(entry, "mount", current.mount if current else ""),
        )
        logger.info(f"Loaded category config: {name} -> {categories[name].directory}")


def load_settings(env_file: Optional[str] = None, config_file: Optional[str] = None) -> Settings:
    """Resolve settings from .env, the environment and config.yaml."""
    load_dotenv(env_file or find_dotenv(usecwd=True))
    env = os.environ

    categories = _builtin_categories(env)
    config_path = Path(config_file or env.get("ASSET_CONFIG", DEFAULT_CONFIG_FILE))
    _merge_categories(categories, load_config_file(config_path))

    # Categories without a directory would only ever serve their default
    for name in list(categories):
        if not categories[name].directory:
            logger.warning(f"Category '{name}' has no directory configured, skipping")
            del categories[name]

    return Settings(
        categories=categories,
        quotes_file=env.get("QUOTES_FILE", ""),
        jokes_file=env.get("JOKES_FILE", ""),
        index_file=env.get("INDEX_FILE", ""),
        host=env.get("HOST", DEFAULT_HOST),
        port=_parse_port(env.get("PORT")),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
