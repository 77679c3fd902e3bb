"""Exception hierarchy for the px500 client.

Validation problems are raised synchronously before any request is made.
Transport, API and decode failures are raised by one-shot calls and carried
in a page's ``err`` field by streaming calls.
"""

__all__ = [
    "APIError",
    "DecodeError",
    "Px500Error",
    "TransportError",
    "ValidationError",
]


class Px500Error(Exception):
    """Base class for every error raised by this package."""

    pass


class ValidationError(Px500Error, ValueError):
    """Raised when a request is missing, malformed, or lacks a required filter."""

    pass


class TransportError(Px500Error):
    """Raised when the HTTP request could not be completed (DNS, connect, timeout)."""

    pass


class APIError(Px500Error):
    """Raised when the API answers with a non-success status code.

    The message is the response body when the server sent one, otherwise the
    status line (e.g. ``404 Not Found``).
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class DecodeError(Px500Error):
    """Raised when a response body cannot be decoded into the expected shape."""

    pass
