"""Encryption resolution: decryption of cipher-marked configuration values."""

from tessera.encryption.cipher import CipherMarker, CipherValue
from tessera.encryption.decryptor import TextDecryptor
from tessera.encryption.provider import EncryptionResolverProvider

__all__ = [
    "CipherMarker",
    "CipherValue",
    "EncryptionResolverProvider",
    "TextDecryptor",
]
