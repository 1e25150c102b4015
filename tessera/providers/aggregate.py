"""Precedence-ordered aggregate over a chain of providers.

The aggregate holds an immutable snapshot of the provider chain. The
provider added last has the highest ordinal and wins when several
providers define the same key. When any provider signals a reload the
aggregate swaps in a new snapshot, re-subscribes to the providers'
fresh tokens and fires its own token so downstream facades are notified.
"""

import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

import structlog

from tessera.errors import ConfigurationError
from tessera.observability.logging import get_null_logger
from tessera.observability.metrics import PROVIDER_RELOADS
from tessera.providers.base import (
    ConfigurationProvider,
    Registration,
    ReloadToken,
    normalize_key,
)


class RawValue(NamedTuple):
    """Unresolved value plus the ordinal of the provider that supplied it."""

    value: str
    ordinal: int


@dataclass(frozen=True)
class ProviderSnapshot:
    """One generation of the provider chain."""

    providers: tuple[ConfigurationProvider, ...]
    generation: int = 0

    def get_raw(self, key: str) -> RawValue | None:
        """Scan from highest to lowest ordinal, returning the first hit."""
        for ordinal in range(len(self.providers) - 1, -1, -1):
            value = self.providers[ordinal].get(key)
            if value is not None:
                return RawValue(value, ordinal)
        return None

    def keys(self, prefix: str | None = None) -> set[str]:
        """Union of all providers' keys, one entry per normalized key."""
        seen: dict[str, str] = {}
        for provider in reversed(self.providers):
            for key in provider.keys(prefix):
                seen.setdefault(normalize_key(key), key)
        return set(seen.values())


class ProviderAggregate:
    """Precedence-resolved raw lookup across an ordered provider chain."""

    def __init__(
        self,
        providers: Sequence[ConfigurationProvider],
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        for provider in providers:
            if not isinstance(provider, ConfigurationProvider):
                raise ConfigurationError(
                    f"Expected a ConfigurationProvider, got {type(provider).__name__}"
                )

        self._logger = logger or get_null_logger()
        self._lock = threading.Lock()
        self._snapshot = ProviderSnapshot(providers=tuple(providers))
        self._token = ReloadToken()
        self._registrations: list[Registration] = []
        self._subscribe(self._snapshot)

    @property
    def snapshot(self) -> ProviderSnapshot:
        """The current snapshot; capture once per top-level lookup."""
        return self._snapshot

    @property
    def providers(self) -> tuple[ConfigurationProvider, ...]:
        return self._snapshot.providers

    def get_raw(self, key: str) -> RawValue | None:
        """Get the raw value and source ordinal for a key, or None."""
        return self._snapshot.get_raw(key)

    def keys(self, prefix: str | None = None) -> set[str]:
        """Enumerate the deduplicated union of keys under a prefix."""
        return self._snapshot.keys(prefix)

    def get_reload_token(self) -> ReloadToken:
        return self._token

    def load(self) -> None:
        """Load every wrapped provider, lowest ordinal first."""
        for provider in self._snapshot.providers:
            provider.load()

    def _subscribe(self, snapshot: ProviderSnapshot) -> None:
        """Register on every provider's current token, outside the lock.

        A token that fires while registering runs the callback at once,
        which reloads again. Registrations made for a snapshot that a newer
        reload has already replaced are dropped.
        """
        registrations = [
            provider.get_reload_token().register(self._on_reload)
            for provider in snapshot.providers
        ]
        with self._lock:
            if self._snapshot.generation == snapshot.generation:
                self._registrations.extend(registrations)
                return
        for registration in registrations:
            registration.dispose()

    def _on_reload(self) -> None:
        with self._lock:
            stale, self._registrations = self._registrations, []
            current = self._snapshot
            snapshot = ProviderSnapshot(
                providers=current.providers,
                generation=current.generation + 1,
            )
            self._snapshot = snapshot
            previous, self._token = self._token, ReloadToken()

        for registration in stale:
            registration.dispose()
        self._subscribe(snapshot)

        PROVIDER_RELOADS.inc()
        self._logger.info(
            "provider_snapshot_reloaded",
            generation=snapshot.generation,
            provider_count=len(snapshot.providers),
        )
        previous.fire()
