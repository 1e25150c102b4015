"""Recursive placeholder resolution against a provider snapshot.

Each placeholder token is resolved in one of four ways:
1. The key is found: its raw value is resolved recursively and substituted
2. The key is missing but the token has a default: the default is resolved
   recursively and substituted
3. The key is missing and there is no default: the token text stays as-is
4. The key is already on the resolution stack: cycle policy applies

Every nested lookup within one top-level call goes through the provider
chain captured in the ResolutionContext. Providers are read live, so a
provider that reloads mid-call is seen with its new data on later hops.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple

import structlog

from tessera.config.models.placeholder import CyclePolicy
from tessera.errors import ResolutionCycleError
from tessera.observability.logging import get_null_logger
from tessera.observability.metrics import PLACEHOLDER_RESOLUTIONS
from tessera.placeholder.parser import (
    LiteralSegment,
    PlaceholderExpression,
    contains_placeholder,
    parse,
)
from tessera.providers.aggregate import ProviderSnapshot, RawValue
from tessera.providers.base import KEY_DELIMITER, normalize_key


class ResolutionOutcome(str, Enum):
    """How a single token was resolved."""

    RESOLVED = "resolved"
    DEFAULT = "default"
    UNRESOLVED = "unresolved"
    CYCLE = "cycle"


class TokenResolution(NamedTuple):
    """Replacement text for one token and how it was produced."""

    text: str
    outcome: ResolutionOutcome


@dataclass(frozen=True)
class ResolutionContext:
    """Per-call resolution state.

    Attributes:
        snapshot: Provider chain captured when the top-level call started
        stack: Key paths currently being resolved, outermost first
    """

    snapshot: ProviderSnapshot
    stack: tuple[str, ...] = ()

    @classmethod
    def for_key(cls, snapshot: ProviderSnapshot, key: str) -> "ResolutionContext":
        """Context for resolving the value of ``key`` itself."""
        return cls(snapshot=snapshot, stack=(key,))

    def contains(self, key_path: str) -> bool:
        target = normalize_key(key_path)
        return any(normalize_key(key) == target for key in self.stack)

    def enter(self, key_path: str) -> "ResolutionContext":
        return replace(self, stack=(*self.stack, key_path))


class PlaceholderResolver:
    """Expands ``${key?default}`` tokens using the aggregate key space."""

    def __init__(
        self,
        cycle_policy: CyclePolicy = CyclePolicy.LITERAL,
        dotted_keys: bool = False,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._cycle_policy = cycle_policy
        self._dotted_keys = dotted_keys
        self._logger = logger or get_null_logger()

    @property
    def cycle_policy(self) -> CyclePolicy:
        return self._cycle_policy

    def resolve(self, raw: str, context: ResolutionContext) -> str:
        """Resolve every placeholder in a raw value.

        Args:
            raw: Unresolved value, possibly containing tokens
            context: Snapshot and resolution stack for this call

        Returns:
            The value with each token replaced by its resolution

        Raises:
            ResolutionCycleError: If a cycle is found under the raise policy
        """
        if not contains_placeholder(raw):
            return raw

        parts: list[str] = []
        for segment in parse(raw):
            if isinstance(segment, LiteralSegment):
                parts.append(segment.text)
            else:
                parts.append(self.resolve_token(segment, context).text)
        return "".join(parts)

    def resolve_token(
        self,
        expression: PlaceholderExpression,
        context: ResolutionContext,
    ) -> TokenResolution:
        """Resolve a single parsed token."""
        found = self._lookup(expression.key_path, context.snapshot)

        if found is not None:
            key, raw_value = found
            if context.contains(key):
                result = self._on_cycle(expression, key, context)
            else:
                result = TokenResolution(
                    self.resolve(raw_value.value, context.enter(key)),
                    ResolutionOutcome.RESOLVED,
                )
        elif expression.default is not None:
            result = TokenResolution(
                self.resolve(expression.default, context),
                ResolutionOutcome.DEFAULT,
            )
        else:
            self._logger.debug(
                "placeholder_unresolved",
                key_path=expression.key_path,
            )
            result = TokenResolution(expression.source, ResolutionOutcome.UNRESOLVED)

        PLACEHOLDER_RESOLUTIONS.labels(outcome=result.outcome.value).inc()
        return result

    def _lookup(
        self,
        key_path: str,
        snapshot: ProviderSnapshot,
    ) -> tuple[str, RawValue] | None:
        raw_value = snapshot.get_raw(key_path)
        if raw_value is not None:
            return key_path, raw_value

        if self._dotted_keys and "." in key_path:
            alternate = key_path.replace(".", KEY_DELIMITER)
            raw_value = snapshot.get_raw(alternate)
            if raw_value is not None:
                return alternate, raw_value

        return None

    def _on_cycle(
        self,
        expression: PlaceholderExpression,
        key: str,
        context: ResolutionContext,
    ) -> TokenResolution:
        if self._cycle_policy is CyclePolicy.RAISE:
            PLACEHOLDER_RESOLUTIONS.labels(outcome=ResolutionOutcome.CYCLE.value).inc()
            raise ResolutionCycleError(key, list(context.stack))

        self._logger.warning(
            "placeholder_cycle_detected",
            key_path=key,
            stack=list(context.stack),
        )
        return TokenResolution(expression.source, ResolutionOutcome.CYCLE)
