"""
Custom exceptions for the REST framework.
"""

from pydantic import ValidationError

__all__ = [
    "ValidationError",
    "RestFrameworkError",
    "RouteConfigurationError",
    "HTTPError",
    "RouteNotFoundError",
]


class RestFrameworkError(Exception):
    """Base exception for REST framework errors."""

    pass


class RouteConfigurationError(RestFrameworkError):
    """Raised when a route is declared incorrectly.

    These are programming mistakes (duplicate metadata, a missing handler, ...)
    and surface while routes are being registered, never at request time.
    """

    pass


class HTTPError(RestFrameworkError):
    """An error carrying the HTTP status code it should be rendered with."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.status_code}, {self.message!r})"


class RouteNotFoundError(HTTPError):
    """Raised when no route matches the request."""

    def __init__(self, path: str):
        super().__init__(404, f"404 Not Found - {path}")
        self.path = path
