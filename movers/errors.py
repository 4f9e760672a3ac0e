"""Exception hierarchy for the movers pipeline."""

from __future__ import annotations


class MoversError(Exception):
    """Base class for every error raised by the movers package."""


# ── Input validation (client errors) ─────────────────────────────────────────


class ValidationError(MoversError):
    """The requested list/date combination can never be served."""


class InvalidDate(ValidationError):
    """Not a real calendar date, or outside the supported year range."""


class WeekendUnavailable(ValidationError):
    """Movers lists are only published for weekdays."""


# ── Remote retrieval ─────────────────────────────────────────────────────────


class FetchError(MoversError):
    """Raised when the remote document cannot be retrieved."""


class NetworkError(FetchError):
    pass


class BadStatus(FetchError):
    def __init__(self, status_code: int, reason: str = "") -> None:
        super().__init__(f"status code error: {status_code} {reason}".rstrip())
        self.status_code = status_code


# ── Document parsing ─────────────────────────────────────────────────────────


class ParseError(MoversError):
    """Raised when the remote document does not have the expected shape."""


class MalformedDocument(ParseError):
    pass


class ColumnCountMismatch(ParseError):
    pass


class NameTickerFormat(ParseError):
    pass


class NumericParseError(ParseError):
    pass
