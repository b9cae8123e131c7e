"""
Configuration management for roster stores.

The configuration is stored as a TOML file in the store directory.
It specifies how searches without a condition token are evaluated
and whether empty searches fall back to the alternative predicate.
"""

import os
import tomllib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import tomli_w

from .tokenizer import Condition


CONFIG_FILENAME = "roster.toml"
CONFIG_VERSION = 1
DEFAULT_STORE_DIR = ".roster"


@dataclass
class SearchConfig:
    """Search behaviour."""
    default_condition: Condition = Condition.AND
    fallback: bool = True


@dataclass
class StoreConfig:
    """Complete store configuration."""
    path: Path
    version: int = CONFIG_VERSION
    created: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    search: SearchConfig = field(default_factory=SearchConfig)

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.path / CONFIG_FILENAME

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()


def get_default_store_path() -> Path:
    """
    Resolve the store directory.

    ROSTER_STORE_PATH wins; otherwise ~/.roster/.
    """
    env_path = os.environ.get("ROSTER_STORE_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path.home() / DEFAULT_STORE_DIR


def load_config(store_path: Path) -> StoreConfig:
    """
    Load configuration from a store directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = store_path / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    version = data.get("store", {}).get("version", 1)
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    search = data.get("search", {})
    condition = Condition.parse(str(search.get("default_condition", ""))) or Condition.AND
    fallback = search.get("fallback", True)
    if not isinstance(fallback, bool):
        raise ValueError(f"search.fallback must be true or false, got {fallback!r}")

    return StoreConfig(
        path=store_path,
        version=version,
        created=data.get("store", {}).get("created", ""),
        search=SearchConfig(default_condition=condition, fallback=fallback),
    )


def save_config(config: StoreConfig) -> None:
    """
    Save configuration to the store directory.

    Creates the directory if it doesn't exist.
    """
    config.path.mkdir(parents=True, exist_ok=True)

    data = {
        "store": {
            "version": config.version,
            "created": config.created,
        },
        "search": {
            "default_condition": config.search.default_condition.value,
            "fallback": config.search.fallback,
        },
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def load_or_create_config(store_path: Path) -> StoreConfig:
    """
    Load existing config or create a new one with defaults.

    This is the main entry point for config management.
    """
    config_path = store_path / CONFIG_FILENAME

    if config_path.exists():
        return load_config(store_path)
    else:
        config = StoreConfig(path=store_path)
        save_config(config)
        return config
