"""Source-specific exceptions."""


class SourceError(Exception):
    """Base exception for upstream photo API errors."""

    transient = False


class TransportError(SourceError):
    """Raised when the upstream API is unreachable, times out or answers 5xx."""

    transient = True


class AuthenticationError(SourceError):
    """Raised when the upstream API rejects our credentials."""


class MalformedResponseError(SourceError):
    """Raised when a response envelope does not have the expected shape."""


class MalformedItemError(SourceError):
    """Raised when a single fetched item cannot be mapped to a canonical record."""

    def __init__(self, item_id: str | None, message: str) -> None:
        super().__init__(f"item {item_id or '<unknown>'}: {message}")
        self.item_id = item_id


class ConfigurationError(SourceError):
    """Raised when adapter configuration is invalid."""
