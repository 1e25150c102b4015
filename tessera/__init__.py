"""Tessera: placeholder and encryption resolution over configuration providers.

Wraps an ordered chain of configuration providers and exposes the same
provider surface, expanding ``${key?default}`` placeholders from the
aggregate key space and, optionally, decrypting ``{cipher}``-marked values
through an injected decryptor.
"""

from tessera.configuration import (
    Configuration,
    ConfigurationBuilder,
    build_configuration,
)
from tessera.encryption import EncryptionResolverProvider, TextDecryptor
from tessera.errors import (
    ConfigurationError,
    DecryptionError,
    ResolutionCycleError,
    TesseraError,
)
from tessera.placeholder import PlaceholderResolverProvider
from tessera.providers import ConfigurationProvider, MemoryProvider, ReloadToken

__all__ = [
    "Configuration",
    "ConfigurationBuilder",
    "ConfigurationError",
    "ConfigurationProvider",
    "DecryptionError",
    "EncryptionResolverProvider",
    "MemoryProvider",
    "PlaceholderResolverProvider",
    "ReloadToken",
    "ResolutionCycleError",
    "TesseraError",
    "TextDecryptor",
    "build_configuration",
]
