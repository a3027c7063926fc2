"""Exceptions for tzrules library."""


class TzRulesError(Exception):
    """Base exception for all tzrules errors."""


class ZoneDataError(TzRulesError):
    """Exception raised when zone data is inconsistent at load time.

    Examples are a zone referencing a rule set that was never defined, a
    link pointing at an unknown zone, or aliases that point at each other.
    """


class ZoneParseError(TzRulesError):
    """Exception raised when parsing zoneinfo source text.

    The 'message' attribute contains a human-readable message about the
    error that occurred. The 'detailed_error' attribute can provide additional
    information about the error, such as the offending source line or the
    underlying validation error, useful for debugging purposes.
    """

    def __init__(self, message: str, *, detailed_error: str | None = None) -> None:
        """Initialize the ZoneParseError with a message."""
        super().__init__(message)
        self.message = message
        self.detailed_error = detailed_error


class ZoneRegistryError(TzRulesError):
    """Exception thrown by a ZoneRegistry."""
