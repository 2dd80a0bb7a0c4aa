"""Shared fixtures for client tests.

This module provides common fixtures used across all client test modules,
including a scripted transport, a discovery document and cache instances.
"""

# pylint: disable=redefined-outer-name
# Pytest fixtures intentionally redefine fixture names - this is expected behavior

import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from clients.discovery import DiscoveryCache
from clients.interfaces.transport import Transport
from core.models import RawResponse
from foundation.cache import MemoryCacheStore


class ScriptedTransport(Transport):
    """Transport returning queued responses and recording every call."""

    def __init__(self, *responses: RawResponse) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def queue(self, *responses: RawResponse) -> None:
        self.responses.extend(responses)

    def execute(self, url: str, options: Any) -> RawResponse:
        self.calls.append((url, dict(options)))
        if not self.responses:
            raise AssertionError(f"Unexpected transport call to {url}")
        return self.responses.pop(0)


def json_response(payload: Any, status_code: int = 200, headers: dict[str, str] | None = None) -> RawResponse:
    return RawResponse(status_code=status_code, headers=headers or {}, text=json.dumps(payload))


def rate_limited_response(reset_in: timedelta = timedelta(0)) -> RawResponse:
    reset_at = datetime.now(timezone.utc) + reset_in
    return RawResponse(
        status_code=429,
        headers={"x-ratelimit-reset": reset_at.strftime("%Y-%m-%d %H:%M:%S UTC")},
        text='{"error": "rate limited"}',
    )


# =============================================================================
# Transport Fixtures
# =============================================================================


@pytest.fixture
def transport() -> ScriptedTransport:
    """Create an empty scripted transport.

    Returns:
        ScriptedTransport: Transport that fails on unexpected calls.
    """
    return ScriptedTransport()


@pytest.fixture
def make_json_response() -> Callable[..., RawResponse]:
    return json_response


@pytest.fixture
def make_rate_limited_response() -> Callable[..., RawResponse]:
    return rate_limited_response


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock requests.Session.

    Returns:
        MagicMock: A mock requests.Session with request and post methods.
    """
    session = MagicMock(spec=requests.Session)
    session.request = MagicMock()
    session.post = MagicMock()
    return session


# =============================================================================
# Discovery Fixtures
# =============================================================================


@pytest.fixture
def chat_discovery_document() -> dict[str, Any]:
    """Trimmed discovery document with nested resources."""
    return {
        "kind": "discovery#restDescription",
        "name": "chat",
        "version": "v1",
        "baseUrl": "https://chat.googleapis.com/",
        "resources": {
            "spaces": {
                "methods": {
                    "get": {"path": "v1/{+name}", "httpMethod": "GET"},
                    "list": {"path": "v1/spaces", "httpMethod": "GET"},
                },
                "resources": {
                    "members": {
                        "methods": {
                            "get": {"path": "v1/{+name}", "httpMethod": "GET"},
                            "list": {"path": "v1/{+parent}/members", "httpMethod": "GET"},
                        }
                    },
                    "messages": {
                        "methods": {
                            "create": {"path": "v1/{+parent}/messages", "httpMethod": "POST"},
                            "update": {"path": "v1/{+message.name}", "httpMethod": "PUT"},
                        }
                    },
                },
            }
        },
    }


@pytest.fixture
def cache_store() -> MemoryCacheStore:
    return MemoryCacheStore(max_entries=16)


@pytest.fixture
def discovery_cache(transport: ScriptedTransport, cache_store: MemoryCacheStore) -> DiscoveryCache:
    """Create a DiscoveryCache with a private store and the scripted transport."""
    return DiscoveryCache(transport=transport, store=cache_store)
