"""Shared test fixtures for the Tessera test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog

from tessera.encryption.decryptor import TextDecryptor
from tessera.errors import DecryptionError


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "[placeholder]\\ndotted_keys = true",
                "development.toml": "[encryption]\\nenabled = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            toml_file = test_config_dir / filename
            toml_file.write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            if self.original_env[key] is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = self.original_env[key]


@pytest.fixture
def env_override() -> Generator[Callable[[dict[str, str]], EnvOverrideContext], None, None]:
    """Context manager for temporarily setting environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"TESSERA_ENCRYPTION__ENABLED": "true"}):
                # test code here
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    yield _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test.

    This ensures test isolation for configuration tests.
    """
    from tessera.config import get_settings
    from tessera.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore structlog defaults so log capture sees fresh loggers."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


class FakeDecryptor(TextDecryptor):
    """Decryptor double backed by a lookup table.

    Cipher texts missing from the table raise DecryptionError, like a real
    decryptor given garbage input.
    """

    def __init__(self, table: dict[str, str] | None = None) -> None:
        self.table = table or {}
        self.calls: list[tuple[str, str | None]] = []

    def decrypt(self, cipher_text: str, key_alias: str | None = None) -> str:
        self.calls.append((cipher_text, key_alias))
        try:
            return self.table[cipher_text]
        except KeyError as exc:
            raise DecryptionError(f"Cannot decrypt '{cipher_text}'") from exc


@pytest.fixture
def decryptor() -> FakeDecryptor:
    """Decryptor that knows 'abc123' -> 'secret' and 'def456' -> 'other'."""
    return FakeDecryptor({"abc123": "secret", "def456": "other"})


@pytest.fixture
def decryptor_factory() -> Callable[..., FakeDecryptor]:
    """Factory for decryptor doubles with a custom lookup table."""

    def _create(table: dict[str, str] | None = None) -> FakeDecryptor:
        return FakeDecryptor(table)

    return _create
