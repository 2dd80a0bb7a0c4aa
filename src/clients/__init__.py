"""Request layer clients: service facade, requests, responses and transports.

This module provides factory functions for creating configured clients from
centralized configuration.
"""

from typing import Any

from config import TransportConfig, get_settings
from core.exceptions import IllegalArgumentError
from core.models import DISCOVERY_INTERFACE, DiscoveryDescriptor

from .discovery import DiscoveryCache, shared_discovery_store
from .interfaces import RequestExtension, Transport
from .oauth import EnvironmentTokenSource, ServiceAccountTokenSource, StaticTokenSource, oauth_service
from .request import Request
from .response import Response
from .service import Requests
from .transport import RequestsTransport


def create_transport(config: TransportConfig | None = None) -> RequestsTransport:
    """Create a configured HTTP transport.

    Args:
        config: Optional TransportConfig. If None, uses settings from
            get_settings().

    Returns:
        Configured RequestsTransport instance.
    """
    if config is None:
        config = get_settings().transport
    return RequestsTransport.from_config(config)


def create_requests(**kwargs: Any) -> Requests:
    """Create a service client.

    Accepts the `Requests` attributes as keywords (`base_url`, `oauth`,
    `discovery`, `transport`, ...). The descriptor fields `name`, `version`,
    `resource` and `method` may also be given directly; they are validated
    together and bound as `discovery`.

    Raises:
        IllegalArgumentError: If descriptor fields are missing, or are given
            alongside `discovery`.

    Example:
        ```python
        from clients import create_requests

        client = create_requests(base_url="https://api.example.com/v1/{thing}")
        client.get({"thing": "42"}).send()
        ```
    """
    descriptor_fields = {key: kwargs.pop(key) for key in DISCOVERY_INTERFACE.required if key in kwargs}
    if descriptor_fields:
        if kwargs.get("discovery") is not None:
            msg = "Expecting either discovery or its fields, not both"
            raise IllegalArgumentError(msg)
        kwargs["discovery"] = DiscoveryDescriptor.from_kwargs(descriptor_fields)
    return Requests(**kwargs)


__all__ = [
    "DiscoveryCache",
    "EnvironmentTokenSource",
    "Request",
    "RequestExtension",
    "Requests",
    "RequestsTransport",
    "Response",
    "ServiceAccountTokenSource",
    "StaticTokenSource",
    "Transport",
    "create_requests",
    "create_transport",
    "oauth_service",
    "shared_discovery_store",
]
