"""Configuration model exports.

This module exports all configuration models for easy access:

    from tessera.config.models import PlaceholderConfig, EncryptionConfig
"""

from tessera.config.models.encryption import EncryptionConfig
from tessera.config.models.observability import LoggingConfig, ObservabilityConfig
from tessera.config.models.placeholder import CyclePolicy, PlaceholderConfig

__all__ = [
    "CyclePolicy",
    "EncryptionConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "PlaceholderConfig",
]
