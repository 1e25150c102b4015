"""Cipher marker detection and parsing.

A cipher-marked value looks like ``{cipher}<text>`` or
``{cipher}{key:<alias>}<text>``, where the optional key selector names
the decryption key to use.
"""

from dataclasses import dataclass

DEFAULT_CIPHER_PREFIX = "{cipher}"
KEY_SELECTOR_OPEN = "{key:"
KEY_SELECTOR_CLOSE = "}"


@dataclass(frozen=True)
class CipherValue:
    """The parts of a cipher-marked value."""

    cipher_text: str
    key_alias: str | None = None

    @property
    def is_malformed(self) -> bool:
        return not self.cipher_text


class CipherMarker:
    """Recognizes and splits cipher-marked values."""

    def __init__(self, prefix: str = DEFAULT_CIPHER_PREFIX) -> None:
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def is_marked(self, value: str) -> bool:
        return value.startswith(self._prefix)

    def parse(self, value: str) -> CipherValue | None:
        """Split a marked value, or return None if it carries no marker.

        An unterminated key selector yields a malformed value with empty
        cipher text.
        """
        if not self.is_marked(value):
            return None

        rest = value[len(self._prefix):]
        if not rest.startswith(KEY_SELECTOR_OPEN):
            return CipherValue(cipher_text=rest)

        end = rest.find(KEY_SELECTOR_CLOSE)
        if end == -1:
            return CipherValue(cipher_text="")

        return CipherValue(
            cipher_text=rest[end + 1:],
            key_alias=rest[len(KEY_SELECTOR_OPEN):end] or None,
        )
