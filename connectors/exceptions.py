"""
Exception types raised by forge connectors.

Every failure while talking to a forge surfaces as a ``ConnectorException``
subclass so callers can abort an export with a single ``except`` clause.
"""


class ConnectorException(Exception):
    """Base exception for all connector errors."""

    pass


class RateLimitException(ConnectorException):
    """Raised when API rate limit is exceeded."""

    pass


class AuthenticationException(ConnectorException):
    """Raised when authentication fails."""

    pass


class NotFoundException(ConnectorException):
    """Raised when the repository or project does not exist."""

    pass


class PaginationException(ConnectorException):
    """Raised when a forge returns a page cursor that does not advance."""

    pass


class APIException(ConnectorException):
    """Raised when API returns an error."""

    pass


class PayloadException(ConnectorException):
    """Raised when an item payload lacks a required field."""

    pass
