"""Placeholder resolution: ``${key?default}`` expansion over a provider chain."""

from tessera.placeholder.parser import (
    LiteralSegment,
    PlaceholderExpression,
    contains_placeholder,
    parse,
)
from tessera.placeholder.provider import PlaceholderResolverProvider
from tessera.placeholder.resolver import (
    PlaceholderResolver,
    ResolutionContext,
    ResolutionOutcome,
    TokenResolution,
)

__all__ = [
    "LiteralSegment",
    "PlaceholderExpression",
    "PlaceholderResolver",
    "PlaceholderResolverProvider",
    "ResolutionContext",
    "ResolutionOutcome",
    "TokenResolution",
    "contains_placeholder",
    "parse",
]
