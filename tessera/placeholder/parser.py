"""Scanner for ``${key?default}`` placeholder tokens.

A raw value is split into literal segments and placeholder expressions.
Token bodies are matched with brace-depth tracking, so a default that
contains nested tokens (or any balanced ``{...}`` text) does not end the
outer token early. Parsing never fails: an unterminated ``${`` is kept as
literal text up to the end of the string.
"""

from dataclasses import dataclass

OPEN = "${"
CLOSE = "}"
DEFAULT_SEPARATOR = "?"


@dataclass(frozen=True)
class LiteralSegment:
    """Text copied through unchanged."""

    text: str


@dataclass(frozen=True)
class PlaceholderExpression:
    """One parsed ``${...}`` token.

    Attributes:
        key_path: Key to look up, taken verbatim
        default: Unparsed default text, or None when the token has no ``?``
        source: The exact token text, emitted when the token stays unresolved
    """

    key_path: str
    default: str | None
    source: str


Segment = LiteralSegment | PlaceholderExpression


def contains_placeholder(raw: str) -> bool:
    """Cheap check for whether a value needs parsing at all."""
    return OPEN in raw


def parse(raw: str) -> tuple[Segment, ...]:
    """Split a raw value into literal segments and placeholder expressions.

    Adjacent literal text is coalesced into one segment; empty literals are
    not emitted.
    """
    segments: list[Segment] = []
    literal: list[str] = []
    pos = 0

    while pos < len(raw):
        start = raw.find(OPEN, pos)
        if start == -1:
            literal.append(raw[pos:])
            break

        literal.append(raw[pos:start])
        end = _find_token_end(raw, start + len(OPEN))
        if end == -1:
            literal.append(raw[start:])
            break

        if any(literal):
            segments.append(LiteralSegment("".join(literal)))
        literal = []

        key_path, default = _split_default(raw[start + len(OPEN):end])
        segments.append(
            PlaceholderExpression(
                key_path=key_path,
                default=default,
                source=raw[start:end + 1],
            )
        )
        pos = end + 1

    if any(literal):
        segments.append(LiteralSegment("".join(literal)))

    return tuple(segments)


def _find_token_end(raw: str, pos: int) -> int:
    """Index of the ``}`` closing a token whose body starts at pos, or -1."""
    depth = 0
    for index in range(pos, len(raw)):
        char = raw[index]
        if char == "{":
            depth += 1
        elif char == CLOSE:
            if depth == 0:
                return index
            depth -= 1
    return -1


def _split_default(body: str) -> tuple[str, str | None]:
    """Split a token body on the first ``?`` outside any nested braces."""
    depth = 0
    for index, char in enumerate(body):
        if char == "{":
            depth += 1
        elif char == CLOSE:
            depth -= 1
        elif char == DEFAULT_SEPARATOR and depth == 0:
            return body[:index], body[index + 1:]
    return body, None
