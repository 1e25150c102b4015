"""In-memory implementation of ConfigurationProvider."""

import threading
from collections.abc import Mapping

from tessera.providers.base import (
    ConfigurationProvider,
    ReloadToken,
    key_has_prefix,
    normalize_key,
)


class MemoryProvider(ConfigurationProvider):
    """In-memory provider for testing and programmatic configuration.

    Holds a dict keyed by the normalized key, remembering the original
    casing for enumeration. Every mutation swaps in a new dict and fires
    the reload token, so readers see either the old or the new data.
    None values are dropped.
    """

    def __init__(self, data: Mapping[str, object] | None = None) -> None:
        """Initialize storage from an optional mapping."""
        self._lock = threading.Lock()
        self._data = self._build(data or {})
        self._token = ReloadToken()

    @staticmethod
    def _build(data: Mapping[str, object]) -> dict[str, tuple[str, str]]:
        return {
            normalize_key(key): (key, str(value))
            for key, value in data.items()
            if value is not None
        }

    def get(self, key: str) -> str | None:
        """Get the value for a key."""
        entry = self._data.get(normalize_key(key))
        return entry[1] if entry is not None else None

    def keys(self, prefix: str | None = None) -> set[str]:
        """Enumerate keys under a prefix."""
        return {
            original
            for original, _ in self._data.values()
            if key_has_prefix(original, prefix)
        }

    def get_reload_token(self) -> ReloadToken:
        """Get the current reload token."""
        return self._token

    def set(self, key: str, value: str) -> None:
        """Set a single key and signal a reload."""
        with self._lock:
            data = dict(self._data)
            data[normalize_key(key)] = (key, value)
            previous = self._swap(data)
        previous.fire()

    def replace(self, data: Mapping[str, object]) -> None:
        """Replace all data and signal a reload."""
        with self._lock:
            previous = self._swap(self._build(data))
        previous.fire()

    def _swap(self, data: dict[str, tuple[str, str]]) -> ReloadToken:
        self._data = data
        previous, self._token = self._token, ReloadToken()
        return previous
