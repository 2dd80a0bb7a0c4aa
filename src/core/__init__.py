"""Core value types and pure helpers for the request layer.

This package holds the code that does not touch the network:
- Exception hierarchy for error handling
- Query string encoding
- URL template translation and interpolation
- Keyword parameter validation
- Immutable records (discovery descriptors, raw responses)
"""

from .exceptions import (
    IllegalArgumentError,
    MissingInterpolationValueError,
    ParseError,
    RequestsError,
    TransportError,
    UnauthorizedError,
    UnknownResourceOrMethodError,
)
from .models import DiscoveryDescriptor, RawResponse, SentRequest

__all__ = [
    "DiscoveryDescriptor",
    "IllegalArgumentError",
    "MissingInterpolationValueError",
    "ParseError",
    "RawResponse",
    "RequestsError",
    "SentRequest",
    "TransportError",
    "UnauthorizedError",
    "UnknownResourceOrMethodError",
]
