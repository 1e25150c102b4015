"""Provider facade that resolves placeholders on every lookup."""

from collections.abc import Sequence

import structlog

from tessera.config.models.placeholder import CyclePolicy, PlaceholderConfig
from tessera.observability.logging import get_null_logger
from tessera.placeholder.resolver import PlaceholderResolver, ResolutionContext
from tessera.providers.aggregate import ProviderAggregate
from tessera.providers.base import ConfigurationProvider, ReloadToken


class PlaceholderResolverProvider(ConfigurationProvider):
    """Wraps a provider chain and resolves ``${...}`` tokens in its values.

    Keys and reload signals pass through from the aggregate unchanged;
    only values are transformed. Nothing is cached, so every lookup sees
    the current snapshot.
    """

    def __init__(
        self,
        providers: Sequence[ConfigurationProvider],
        config: PlaceholderConfig | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        config = config or PlaceholderConfig()
        logger = logger or get_null_logger()
        self._aggregate = ProviderAggregate(providers, logger=logger)
        self._resolver = PlaceholderResolver(
            cycle_policy=CyclePolicy(config.cycle_policy),
            dotted_keys=config.dotted_keys,
            logger=logger,
        )

    @property
    def providers(self) -> tuple[ConfigurationProvider, ...]:
        """The wrapped provider chain, lowest precedence first."""
        return self._aggregate.providers

    @property
    def resolver(self) -> PlaceholderResolver:
        return self._resolver

    def get(self, key: str) -> str | None:
        """Get the placeholder-resolved value for a key."""
        snapshot = self._aggregate.snapshot
        raw_value = snapshot.get_raw(key)
        if raw_value is None:
            return None
        return self._resolver.resolve(
            raw_value.value,
            ResolutionContext.for_key(snapshot, key),
        )

    def keys(self, prefix: str | None = None) -> set[str]:
        return self._aggregate.keys(prefix)

    def get_reload_token(self) -> ReloadToken:
        return self._aggregate.get_reload_token()

    def load(self) -> None:
        self._aggregate.load()
