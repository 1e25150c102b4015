"""TOML configuration loader with deep merge support."""

import os
import tomllib
from pathlib import Path
from typing import Any


def get_config_dir() -> Path:
    """Get the configuration directory path.

    TESSERA_CONFIG_DIR wins when set and must exist. Otherwise this is
    `config/` under the working directory, which may be absent.
    """
    configured = os.environ.get("TESSERA_CONFIG_DIR")
    if not configured:
        return Path.cwd() / "config"

    path = Path(configured)
    if not path.is_dir():
        raise FileNotFoundError(f"Config directory not found: {configured}")
    return path


def get_environment() -> str:
    """Get the current environment from TESSERA_ENV.

    Defaults to 'development' if not set.
    """
    return os.environ.get("TESSERA_ENV", "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return base with override merged in; nested tables merge recursively."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Merge config/default.toml and config/{TESSERA_ENV}.toml.

    Either file may be missing; with neither present the result is empty
    and model defaults apply.
    """
    config_dir = get_config_dir()
    config: dict[str, Any] = {}
    for name in ("default", get_environment()):
        path = config_dir / f"{name}.toml"
        if path.is_file():
            config = deep_merge(config, load_toml(path))
    return config
