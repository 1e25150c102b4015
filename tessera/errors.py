"""Exception hierarchy for the resolution engine.

All engine exceptions inherit from TesseraError, which carries the
message as an attribute so callers can log or re-wrap it without
parsing ``str(exc)``.
"""


class TesseraError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(TesseraError):
    """Raised at construction when a required collaborator is missing or invalid."""


class ResolutionCycleError(TesseraError):
    """Raised when a placeholder refers back to a key already being resolved.

    Only raised under the ``raise`` cycle policy; the default policy
    leaves the token literal and logs instead.
    """

    def __init__(self, key_path: str, chain: list[str]) -> None:
        self.key_path = key_path
        self.chain = chain
        cycle = " -> ".join([*chain, key_path])
        super().__init__(f"Placeholder cycle detected for '{key_path}': {cycle}")


class DecryptionError(TesseraError):
    """Raised when a cipher-marked value cannot be decrypted."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
