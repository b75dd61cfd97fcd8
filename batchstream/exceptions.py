"""
Defines custom exceptions for the application to allow for more specific error handling.
"""

from http import HTTPStatus


class BatchStreamError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(BatchStreamError):
    """Raised for issues related to configuration loading or validation."""


class AlreadyClosedError(BatchStreamError):
    """Raised when closing a multi-source stream that has no open source."""

    def __init__(self, message: str = "Already closed"):
        super().__init__(message)


class TransportError(BatchStreamError):
    """Raised when a source cannot be reached or its transfer breaks off."""


class HTTPStatusError(TransportError):
    """
    Raised when a request for a source results in something other than a 200 code.
    """

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Received HTTP code {status}: {self.reason}")

    @property
    def reason(self) -> str:
        """The standard status text for the code, empty if the code is unknown."""
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HTTPStatusError):
            return self.status == other.status
        return NotImplemented

    def __hash__(self) -> int:
        return hash((HTTPStatusError, self.status))
