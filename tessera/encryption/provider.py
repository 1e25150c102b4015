"""Provider facade that decrypts cipher-marked values on every lookup."""

from collections.abc import Sequence

import structlog

from tessera.config.models.encryption import EncryptionConfig
from tessera.encryption.cipher import CipherMarker
from tessera.encryption.decryptor import TextDecryptor
from tessera.errors import ConfigurationError, DecryptionError
from tessera.observability.logging import get_null_logger
from tessera.observability.metrics import DECRYPTIONS
from tessera.providers.aggregate import ProviderAggregate
from tessera.providers.base import ConfigurationProvider, ReloadToken


class EncryptionResolverProvider(ConfigurationProvider):
    """Wraps a provider chain and decrypts values carrying the cipher marker.

    Wrap a PlaceholderResolverProvider to decrypt after placeholder
    expansion, so a value is decrypted once, at the point it is finally
    chosen. Unmarked values pass through unchanged. Decryption failures
    are raised as DecryptionError for the key being read; other keys are
    unaffected.
    """

    def __init__(
        self,
        providers: Sequence[ConfigurationProvider],
        decryptor: TextDecryptor | None,
        config: EncryptionConfig | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        if decryptor is None:
            raise ConfigurationError("Encryption resolver requires a decryptor")
        if not isinstance(decryptor, TextDecryptor):
            raise ConfigurationError(
                f"Expected a TextDecryptor, got {type(decryptor).__name__}"
            )

        config = config or EncryptionConfig()
        self._logger = logger or get_null_logger()
        self._aggregate = ProviderAggregate(providers, logger=self._logger)
        self._decryptor = decryptor
        self._marker = CipherMarker(config.cipher_prefix)

    @property
    def providers(self) -> tuple[ConfigurationProvider, ...]:
        """The wrapped provider chain, lowest precedence first."""
        return self._aggregate.providers

    @property
    def decryptor(self) -> TextDecryptor:
        return self._decryptor

    def get(self, key: str) -> str | None:
        """Get the value for a key, decrypting it if it is cipher-marked.

        Raises:
            DecryptionError: If the value is marked but cannot be decrypted
        """
        raw_value = self._aggregate.get_raw(key)
        if raw_value is None:
            return None

        cipher = self._marker.parse(raw_value.value)
        if cipher is None:
            return raw_value.value

        if cipher.is_malformed:
            self._record_failure(key, "malformed cipher value")
            raise DecryptionError(f"Malformed cipher value for key '{key}'", key=key)

        try:
            plaintext = self._decryptor.decrypt(cipher.cipher_text, cipher.key_alias)
        except Exception as exc:
            self._record_failure(key, str(exc))
            raise DecryptionError(
                f"Failed to decrypt value for key '{key}': {exc}",
                key=key,
            ) from exc

        DECRYPTIONS.labels(outcome="success").inc()
        return plaintext

    def keys(self, prefix: str | None = None) -> set[str]:
        return self._aggregate.keys(prefix)

    def get_reload_token(self) -> ReloadToken:
        return self._aggregate.get_reload_token()

    def load(self) -> None:
        self._aggregate.load()

    def _record_failure(self, key: str, reason: str) -> None:
        DECRYPTIONS.labels(outcome="failure").inc()
        self._logger.error("decryption_failed", key=key, reason=reason)
