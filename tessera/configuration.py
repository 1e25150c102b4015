"""Consumer-facing configuration and its builder.

The builder collects raw providers and the requested resolution layers,
then composes them in a fixed order regardless of call order:

    raw providers -> placeholder resolution -> decryption

so a placeholder can select a cipher-marked value and that value is
decrypted once, after expansion.

Example usage:

    from tessera.configuration import ConfigurationBuilder

    configuration = (
        ConfigurationBuilder()
        .add_memory({"db:host": "localhost", "db:url": "pg://${db:host?127.0.0.1}"})
        .add_placeholder_resolver()
        .build()
    )
    configuration["db:url"]  # "pg://localhost"
"""

from collections.abc import Iterator, Mapping, Sequence

import structlog

from tessera.config import Settings, get_settings
from tessera.config.models.encryption import EncryptionConfig
from tessera.config.models.placeholder import PlaceholderConfig
from tessera.encryption.decryptor import TextDecryptor
from tessera.encryption.provider import EncryptionResolverProvider
from tessera.errors import ConfigurationError
from tessera.observability.logging import get_logger, get_null_logger, setup_logging
from tessera.placeholder.provider import PlaceholderResolverProvider
from tessera.providers.aggregate import ProviderAggregate
from tessera.providers.base import (
    KEY_DELIMITER,
    ConfigurationProvider,
    ReloadToken,
    normalize_key,
)
from tessera.providers.memory import MemoryProvider


class Configuration:
    """Read surface over a composed provider chain.

    Attributes are computed on every access; nothing is cached, so a
    reload of any raw provider is visible on the next read.
    """

    def __init__(
        self,
        providers: Sequence[ConfigurationProvider],
        placeholder: PlaceholderConfig | None = None,
        decryptor: TextDecryptor | None = None,
        encryption: EncryptionConfig | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._raw_providers = tuple(providers)
        self._placeholder = placeholder
        self._decryptor = decryptor
        self._encryption = encryption
        self._logger = logger or get_null_logger()

        chain: list[ConfigurationProvider] = list(self._raw_providers)
        if placeholder is not None:
            chain = [PlaceholderResolverProvider(chain, placeholder, logger=self._logger)]
        if decryptor is not None:
            chain = [
                EncryptionResolverProvider(
                    chain,
                    decryptor,
                    encryption,
                    logger=self._logger,
                )
            ]
        self._root = ProviderAggregate(chain, logger=self._logger)

    @property
    def providers(self) -> tuple[ConfigurationProvider, ...]:
        """The raw providers, lowest precedence first."""
        return self._raw_providers

    @property
    def has_placeholder_resolver(self) -> bool:
        return self._placeholder is not None

    @property
    def has_encryption_resolver(self) -> bool:
        return self._decryptor is not None

    def __getitem__(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        # Resolution never adds or removes keys
        return isinstance(key, str) and any(
            provider.get(key) is not None for provider in self._raw_providers
        )

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.keys()))

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get the fully resolved value for a key, or default if absent."""
        raw_value = self._root.get_raw(key)
        return raw_value.value if raw_value is not None else default

    def keys(self, prefix: str | None = None) -> set[str]:
        """Enumerate keys under a prefix; resolution never changes the key set."""
        return self._root.keys(prefix)

    def get_children(self, path: str | None = None) -> list[str]:
        """Get the distinct immediate child segment names under a path."""
        offset = len(path) + len(KEY_DELIMITER) if path else 0
        children: dict[str, str] = {}
        for key in self.keys(path):
            relative = key[offset:]
            if not relative:
                continue
            child = relative.split(KEY_DELIMITER, 1)[0]
            children.setdefault(normalize_key(child), child)
        return sorted(children.values(), key=normalize_key)

    def get_section(self, path: str) -> dict[str, str]:
        """Get resolved values for every key under a path, keyed relative to it."""
        offset = len(path) + len(KEY_DELIMITER)
        section: dict[str, str] = {}
        for key in self.keys(path):
            relative = key[offset:]
            if not relative:
                continue
            value = self.get(key)
            if value is not None:
                section[relative] = value
        return section

    def get_reload_token(self) -> ReloadToken:
        """Get the token that fires when any raw provider reloads."""
        return self._root.get_reload_token()

    def reload(self) -> None:
        """Ask every provider to reload from its source."""
        self._root.load()

    def with_placeholder_resolver(
        self,
        config: PlaceholderConfig | None = None,
    ) -> "Configuration":
        """Return a configuration with placeholder resolution added.

        Returns this instance unchanged if placeholder resolution is
        already active.
        """
        if self.has_placeholder_resolver:
            return self
        return Configuration(
            self._raw_providers,
            placeholder=config or PlaceholderConfig(),
            decryptor=self._decryptor,
            encryption=self._encryption,
            logger=self._logger,
        )

    def with_encryption_resolver(
        self,
        decryptor: TextDecryptor,
        config: EncryptionConfig | None = None,
    ) -> "Configuration":
        """Return a configuration with decryption added.

        Returns this instance unchanged if decryption is already active.

        Raises:
            ConfigurationError: If no decryptor is given
        """
        if decryptor is None:
            raise ConfigurationError("Encryption resolver requires a decryptor")
        if self.has_encryption_resolver:
            return self
        return Configuration(
            self._raw_providers,
            placeholder=self._placeholder,
            decryptor=decryptor,
            encryption=config,
            logger=self._logger,
        )


class ConfigurationBuilder:
    """Collects providers and resolution layers, then builds a Configuration."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger
        self._providers: list[ConfigurationProvider] = []
        self._placeholder: PlaceholderConfig | None = None
        self._decryptor: TextDecryptor | None = None
        self._encryption: EncryptionConfig | None = None

    @property
    def providers(self) -> list[ConfigurationProvider]:
        return list(self._providers)

    def add(self, provider: ConfigurationProvider) -> "ConfigurationBuilder":
        """Add a provider; later providers override earlier ones."""
        if not isinstance(provider, ConfigurationProvider):
            raise ConfigurationError(
                f"Expected a ConfigurationProvider, got {type(provider).__name__}"
            )
        self._providers.append(provider)
        return self

    def add_memory(self, data: Mapping[str, object]) -> "ConfigurationBuilder":
        """Add an in-memory provider holding the given keys."""
        return self.add(MemoryProvider(data))

    def add_placeholder_resolver(
        self,
        config: PlaceholderConfig | None = None,
    ) -> "ConfigurationBuilder":
        """Request placeholder resolution; repeated calls are ignored."""
        if self._placeholder is None:
            self._placeholder = config or PlaceholderConfig()
        return self

    def add_encryption_resolver(
        self,
        decryptor: TextDecryptor,
        config: EncryptionConfig | None = None,
    ) -> "ConfigurationBuilder":
        """Request decryption of cipher-marked values; repeated calls are ignored.

        Raises:
            ConfigurationError: If no decryptor is given
        """
        if decryptor is None:
            raise ConfigurationError("Encryption resolver requires a decryptor")
        if self._decryptor is None:
            self._decryptor = decryptor
            self._encryption = config
        return self

    def build(self) -> Configuration:
        """Compose the layers and load every provider."""
        configuration = Configuration(
            self._providers,
            placeholder=self._placeholder,
            decryptor=self._decryptor,
            encryption=self._encryption,
            logger=self._logger,
        )
        configuration.reload()
        return configuration


def build_configuration(
    providers: Sequence[ConfigurationProvider],
    settings: Settings | None = None,
    decryptor: TextDecryptor | None = None,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> Configuration:
    """Build a configuration with the layers enabled in settings.

    Args:
        providers: Raw providers, lowest precedence first
        settings: Engine settings (default: get_settings())
        decryptor: Required when settings.encryption.enabled is true
        logger: Logger for engine diagnostics. When omitted, logging is
            configured from settings.observability.logging and a
            "tessera" logger is used

    Raises:
        ConfigurationError: If encryption is enabled without a decryptor
    """
    settings = settings or get_settings()
    if logger is None:
        setup_logging(**settings.observability.logging.model_dump())
        logger = get_logger("tessera")

    builder = ConfigurationBuilder(logger=logger)
    for provider in providers:
        builder.add(provider)

    if settings.placeholder.enabled:
        builder.add_placeholder_resolver(settings.placeholder)

    if settings.encryption.enabled:
        if decryptor is None:
            raise ConfigurationError(
                "Encryption is enabled in settings but no decryptor was supplied"
            )
        builder.add_encryption_resolver(decryptor, settings.encryption)

    return builder.build()
