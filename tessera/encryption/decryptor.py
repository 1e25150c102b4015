"""TextDecryptor abstract interface."""

from abc import ABC, abstractmethod


class TextDecryptor(ABC):
    """Abstract interface for turning cipher text into plain text.

    Implementations own the key material and cryptographic primitives.
    They should raise ``tessera.errors.DecryptionError`` for malformed or
    unrecoverable input; any other exception is wrapped into one by the
    encryption layer.
    """

    @abstractmethod
    def decrypt(self, cipher_text: str, key_alias: str | None = None) -> str:
        """Decrypt cipher text, optionally with a named key."""
        pass
