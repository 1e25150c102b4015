"""ConfigurationProvider abstract interface and reload signalling."""

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable

KEY_DELIMITER = ":"

ReloadCallback = Callable[[], None]


def normalize_key(key: str) -> str:
    """Return the comparison form of a key (keys are case-insensitive)."""
    return key.casefold()


def key_has_prefix(key: str, prefix: str | None) -> bool:
    """Check whether a key lives under a prefix, on segment boundaries.

    ``a:b`` is under ``a:b`` and ``a``; ``a:bc`` is not under ``a:b``.
    """
    if not prefix:
        return True
    key_norm = normalize_key(key)
    prefix_norm = normalize_key(prefix)
    return key_norm == prefix_norm or key_norm.startswith(prefix_norm + KEY_DELIMITER)


class Registration:
    """Handle returned by ReloadToken.register; dispose() detaches the callback."""

    def __init__(self, token: "ReloadToken", callback: ReloadCallback) -> None:
        self._token = token
        self._callback = callback

    def dispose(self) -> None:
        self._token._unregister(self._callback)


class ReloadToken:
    """One-shot change signal.

    A provider hands out its current token; when its data changes it swaps
    in a fresh token and fires the old one. Callbacks registered after the
    token fired run immediately.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._callbacks: list[ReloadCallback] = []
        self._fired = False

    @property
    def has_changed(self) -> bool:
        return self._fired

    def register(self, callback: ReloadCallback) -> Registration:
        """Register a callback to run when the token fires."""
        with self._lock:
            fired = self._fired
            if not fired:
                self._callbacks.append(callback)
        if fired:
            callback()
        return Registration(self, callback)

    def fire(self) -> None:
        """Fire the token, running each registered callback once."""
        with self._lock:
            if self._fired:
                return
            self._fired = True
            callbacks = self._callbacks
            self._callbacks = []
        for callback in callbacks:
            callback()

    def _unregister(self, callback: ReloadCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)


class ConfigurationProvider(ABC):
    """Abstract interface for one source of raw key/value configuration.

    Keys are ``:``-delimited hierarchical paths compared case-insensitively.
    Values are strings; a provider never reports a key with a None value.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Get the value for a key, or None if the key is not present."""
        pass

    @abstractmethod
    def keys(self, prefix: str | None = None) -> set[str]:
        """Enumerate keys, optionally restricted to those under a prefix."""
        pass

    @abstractmethod
    def get_reload_token(self) -> ReloadToken:
        """Get the token that fires when this provider's data changes."""
        pass

    def load(self) -> None:  # noqa: B027
        """Load (or reload) data from the underlying source."""
        pass
