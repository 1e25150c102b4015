"""Configuration providers: the provider contract, an in-memory provider,
and the precedence-ordered aggregate the resolution layers are built on.
"""

from tessera.providers.aggregate import ProviderAggregate, ProviderSnapshot, RawValue
from tessera.providers.base import (
    KEY_DELIMITER,
    ConfigurationProvider,
    Registration,
    ReloadToken,
)
from tessera.providers.memory import MemoryProvider

__all__ = [
    "KEY_DELIMITER",
    "ConfigurationProvider",
    "MemoryProvider",
    "ProviderAggregate",
    "ProviderSnapshot",
    "RawValue",
    "Registration",
    "ReloadToken",
]
