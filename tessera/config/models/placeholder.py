"""Placeholder resolution configuration models."""

from enum import Enum

from pydantic import BaseModel, Field


class CyclePolicy(str, Enum):
    """What to do when a placeholder refers back to a key being resolved."""

    LITERAL = "literal"
    RAISE = "raise"


class PlaceholderConfig(BaseModel):
    """Configuration for the placeholder resolver layer."""

    enabled: bool = Field(
        default=True,
        description="Wrap providers with placeholder resolution",
    )
    cycle_policy: CyclePolicy = Field(
        default=CyclePolicy.LITERAL,
        description="Leave cyclic tokens literal (and log) or raise",
    )
    dotted_keys: bool = Field(
        default=False,
        description="Retry unresolved dotted key paths with the key delimiter",
    )
