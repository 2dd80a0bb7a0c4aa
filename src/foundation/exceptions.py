"""Exception classes for foundation utilities.

This module provides exception classes used by foundation components such as
the HTTP transport and the OAuth token providers.
"""


class FoundationError(Exception):
    """Base exception class for foundation-related errors."""


class UpstreamError(FoundationError):
    """Exception raised when an upstream dependency service fails.

    This exception indicates that a remote endpoint could not be reached, the
    connection dropped, or a token endpoint refused to issue a token. The
    request layer translates it into `core.exceptions.TransportError` with the
    attempted request attached.
    """
