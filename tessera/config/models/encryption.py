"""Encryption resolution configuration models."""

from pydantic import BaseModel, Field


class EncryptionConfig(BaseModel):
    """Configuration for the encryption resolver layer."""

    enabled: bool = Field(
        default=False,
        description="Wrap providers with decryption of cipher-marked values",
    )
    cipher_prefix: str = Field(
        default="{cipher}",
        min_length=1,
        description="Marker that flags a value as ciphertext",
    )
