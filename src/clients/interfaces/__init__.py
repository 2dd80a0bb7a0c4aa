"""Abstract base classes (interfaces) for request layer collaborators.

This sub-package contains the contracts the request layer depends on: the
transport, token sources and the request extension point. Concrete
implementations live in the parent `clients` package.
"""

from .extension import RequestExtension
from .oauth import AccessCheckingTokenSource, TokenAttributeSource, TokenSource, read_token
from .transport import Transport, TransportOptions

__all__ = [
    "AccessCheckingTokenSource",
    "RequestExtension",
    "TokenAttributeSource",
    "TokenSource",
    "Transport",
    "TransportOptions",
    "read_token",
]
