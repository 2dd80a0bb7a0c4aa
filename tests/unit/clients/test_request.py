"""Unit tests for clients.request module.

This file tests Request, the unit of work produced by the Requests facade:
materialization into url + transport options, bearer token injection,
single sends and the rate-limit aware retry.

# Test Coverage

The tests cover:
  - Fields Projection: add_field, clear_fields, override of a `fields` param
  - Materialization: query string, embedded url, JSON body and content type
  - Authorization: bearer header from each token source shape, missing token
  - Sending: response wrapping, request echo, transport failures
  - Extensions: before_send and after_response hooks
  - Retry: single retry after a rate-limited response

# Test Structure

Tests use pytest class-based organization with a scripted transport from
conftest.py. Sleeping is patched out where a rate limit is involved.

# Running Tests

Run with: pytest tests/unit/clients/test_request.py
"""

import json
from datetime import timedelta
from typing import Any
from unittest.mock import patch

import pytest

from clients.interfaces.extension import RequestExtension
from clients.oauth import EnvironmentTokenSource, StaticTokenSource
from clients.request import Request
from clients.response import Response
from core.exceptions import TransportError, UnauthorizedError
from core.models import RawResponse
from foundation.exceptions import UpstreamError


class RefreshingSource:
    """Token source with the has_access/get_access_token shape."""

    def __init__(self, token: str | None) -> None:
        self._token = token
        self.checks = 0

    def has_access(self) -> bool:
        self.checks += 1
        return self._token is not None

    def get_access_token(self) -> str:
        assert self._token is not None
        return self._token


class FailingTransport:
    def execute(self, url: str, options: Any) -> RawResponse:
        raise UpstreamError("connection refused")

    def close(self) -> None:
        pass


@pytest.fixture
def request_factory(transport):
    def _make(**kwargs: Any) -> Request:
        kwargs.setdefault("url", "https://api.example.com/v1/things")
        return Request(transport=transport, **kwargs)

    return _make


# =============================================================================
# Fields Projection Tests
# =============================================================================


class TestFieldsProjection:
    """Test suite for the `fields` projection."""

    def test_fields_are_comma_joined(self, request_factory) -> None:
        request = request_factory().add_field("name").add_field("displayName")

        url, _ = request.materialize()

        assert url == "https://api.example.com/v1/things?fields=name%2CdisplayName"
        assert request.fields == ("name", "displayName")

    def test_fields_override_same_named_param(self, request_factory) -> None:
        """Test that the projection wins over an explicit `fields` param.

        **Why this test is important:**
          - Callers may pass `fields` in params and also use add_field
          - Two `fields` keys in one query would be ambiguous upstream

        **What it tests:**
          - Only the projection value is encoded
          - Other params keep their values
        """
        request = request_factory(params={"fields": "ignored", "pageSize": 5})
        request.add_field("id")

        assert request.query_params() == {"fields": "id", "pageSize": 5}

    def test_clear_fields_restores_params(self, request_factory) -> None:
        request = request_factory(params={"fields": "kept"}).add_field("id").clear_fields()

        assert request.query_params() == {"fields": "kept"}


# =============================================================================
# Materialization Tests
# =============================================================================


class TestMaterialize:
    """Test suite for Request.materialize."""

    def test_without_params_or_body(self, request_factory) -> None:
        url, options = request_factory().materialize()

        assert url == "https://api.example.com/v1/things"
        assert options == {
            "method": "get",
            "headers": {},
            "mute_exceptions": True,
            "url": "https://api.example.com/v1/things",
        }

    def test_embed_url_false_omits_url(self, request_factory) -> None:
        _, options = request_factory(params={"q": "a b"}).materialize(embed_url=False)

        assert "url" not in options

    def test_list_params_repeat_key(self, request_factory) -> None:
        url, _ = request_factory(params={"id": [1, 2]}).materialize()

        assert url.endswith("?id=1&id=2")

    def test_body_is_serialized_with_content_type(self, request_factory) -> None:
        """Test that a non-empty body becomes a JSON string.

        **Why this test is important:**
          - Transports send the body as-is, so it must already be serialized
          - Servers reject JSON without the matching content type

        **What it tests:**
          - options["body"] decodes back to the body mapping
          - Content-Type is application/json
          - The request's own headers are not modified by the content type
        """
        request = request_factory(method="post", body={"text": "hello", "thread": {"name": "t1"}})

        _, options = request.materialize()

        assert json.loads(options["body"]) == {"text": "hello", "thread": {"name": "t1"}}
        assert options["headers"]["Content-Type"] == "application/json"
        assert "Content-Type" not in request.headers

    def test_empty_body_is_not_sent(self, request_factory) -> None:
        _, options = request_factory(method="post").materialize()

        assert "body" not in options
        assert "Content-Type" not in options["headers"]

    def test_mute_exceptions_is_forwarded(self, request_factory) -> None:
        _, options = request_factory().materialize(mute_exceptions=False)

        assert options["mute_exceptions"] is False


# =============================================================================
# Authorization Tests
# =============================================================================


class TestAuthorization:
    """Test suite for bearer token injection."""

    def test_static_token(self, request_factory) -> None:
        request = request_factory(oauth=StaticTokenSource("abc"))

        _, options = request.materialize()

        assert options["headers"]["Authorization"] == "Bearer abc"
        assert request.headers["Authorization"] == "Bearer abc"

    def test_access_checking_source(self, request_factory) -> None:
        source = RefreshingSource("fresh")

        _, options = request_factory(oauth=source).materialize()

        assert options["headers"]["Authorization"] == "Bearer fresh"
        assert source.checks == 1

    def test_source_without_access_raises(self, request_factory) -> None:
        """Test that a token source yielding no token stops the request.

        **Why this test is important:**
          - Sending without credentials would produce a confusing 401 upstream
          - Callers need a specific error to react to

        **What it tests:**
          - UnauthorizedError is raised at materialization
          - Nothing reaches the transport
        """
        request = request_factory(oauth=RefreshingSource(None))

        with pytest.raises(UnauthorizedError):
            request.send()

        assert request.transport.calls == []

    def test_empty_static_token_raises(self, request_factory) -> None:
        with pytest.raises(UnauthorizedError):
            request_factory(oauth=StaticTokenSource("")).materialize()

    def test_environment_source(self, request_factory, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEST_ACCESS_TOKEN", "from-env")

        _, options = request_factory(oauth=EnvironmentTokenSource("TEST_ACCESS_TOKEN")).materialize()

        assert options["headers"]["Authorization"] == "Bearer from-env"

    def test_no_source_sends_no_header(self, request_factory) -> None:
        _, options = request_factory().materialize()

        assert "Authorization" not in options["headers"]

    @pytest.mark.parametrize("existing", ["Authorization", "authorization", "AUTHORIZATION"])
    def test_existing_authorization_is_replaced(self, request_factory, existing: str) -> None:
        """Test that the bearer header replaces a pre-set authorization header.

        **Why this test is important:**
          - Sticky headers may carry a stale or differently cased credential
          - Two authorization headers would reach the server otherwise

        **What it tests:**
          - Any case variant of the header is dropped
          - Exactly one Authorization header carries the new token
        """
        request = request_factory(headers={existing: "Bearer old", "X-Trace": "1"}, oauth=StaticTokenSource("new"))

        _, options = request.materialize()

        auth_keys = [key for key in options["headers"] if key.lower() == "authorization"]
        assert auth_keys == ["Authorization"]
        assert options["headers"]["Authorization"] == "Bearer new"
        assert options["headers"]["X-Trace"] == "1"

    def test_existing_authorization_kept_without_source(self, request_factory) -> None:
        _, options = request_factory(headers={"authorization": "Bearer old"}).materialize()

        assert options["headers"] == {"authorization": "Bearer old"}


# =============================================================================
# Send Tests
# =============================================================================


class TestSend:
    """Test suite for Request.send."""

    def test_send_wraps_raw_response(self, request_factory, transport, make_json_response) -> None:
        """Test a single send end to end.

        **Why this test is important:**
          - send() is the path every call takes
          - The response must echo what was actually sent

        **What it tests:**
          - The transport receives the url with query string
          - Options passed to the transport carry no url
          - The Response exposes status, parsed JSON and the sent request
        """
        transport.queue(make_json_response({"name": "spaces/AAA"}))
        request = request_factory(params={"pageSize": 10}, headers={"X-Trace": "1"})

        response = request.send()

        url, options = transport.calls[0]
        assert url == "https://api.example.com/v1/things?pageSize=10"
        assert "url" not in options
        assert options["headers"] == {"X-Trace": "1"}
        assert isinstance(response, Response)
        assert response.ok
        assert response.json == {"name": "spaces/AAA"}
        assert response.request is not None
        assert response.request.url == url
        assert response.request.method == "get"

    def test_non_200_is_returned_not_raised(self, request_factory, transport, make_json_response) -> None:
        transport.queue(make_json_response({"error": "nope"}, status_code=404))

        response = request_factory().send()

        assert response.status_code == 404
        assert not response.ok

    def test_transport_failure_becomes_transport_error(self) -> None:
        request = Request(url="https://api.example.com/down", transport=FailingTransport())

        with pytest.raises(TransportError) as exc_info:
            request.send()

        assert exc_info.value.url == "https://api.example.com/down"
        assert exc_info.value.options["method"] == "get"
        assert isinstance(exc_info.value.__cause__, UpstreamError)

    def test_resolve_returns_parsed_json(self, request_factory, transport, make_json_response) -> None:
        transport.queue(make_json_response([1, 2, 3]))

        assert request_factory().resolve() == [1, 2, 3]


# =============================================================================
# Extension Tests
# =============================================================================


class TestExtension:
    """Test suite for RequestExtension hooks."""

    def test_hooks_run_around_send(self, request_factory, transport, make_json_response) -> None:
        """Test that both hooks are invoked with the request.

        **Why this test is important:**
          - Wrappers rely on hooks to add headers and post-process responses
          - Hook results must replace the values that flow onward

        **What it tests:**
          - before_send can rewrite url and headers seen by the transport
          - after_response can replace the returned response
        """
        seen: dict[str, Any] = {}

        class Tracing(RequestExtension):
            def before_send(self, request, url, options):
                seen["request"] = request
                options["headers"]["X-Trace-Id"] = "t-1"
                return url + "&traced=1", options

            def after_response(self, request, response):
                seen["status"] = response.status_code
                return Response(raw=RawResponse(status_code=200, text='{"wrapped": true}'))

        transport.queue(make_json_response({}, status_code=201))
        request = request_factory(params={"a": "b"}, extension=Tracing())

        response = request.send()

        url, options = transport.calls[0]
        assert url == "https://api.example.com/v1/things?a=b&traced=1"
        assert options["headers"]["X-Trace-Id"] == "t-1"
        assert seen == {"request": request, "status": 201}
        assert response.json == {"wrapped": True}

    def test_base_extension_is_pass_through(self, request_factory, transport, make_json_response) -> None:
        transport.queue(make_json_response({"ok": 1}))

        response = request_factory(extension=RequestExtension()).send()

        assert transport.calls[0][0] == "https://api.example.com/v1/things"
        assert response.json == {"ok": 1}


# =============================================================================
# Retry Tests
# =============================================================================


class TestSendWithRetry:
    """Test suite for Request.send_with_retry."""

    def test_retries_once_after_rate_limit(
        self, request_factory, transport, make_json_response, make_rate_limited_response
    ) -> None:
        """Test that a 429 is followed by exactly one more send.

        **Why this test is important:**
          - Rate limits are expected under load and must be absorbed
          - The wait must honour the reset header

        **What it tests:**
          - The transport is called twice
          - The second response is returned
          - The sleep lasts roughly until the advertised reset
        """
        transport.queue(make_rate_limited_response(timedelta(seconds=2)), make_json_response({"done": True}))

        with patch("foundation.rate_limiter.time.sleep") as mock_sleep:
            response = request_factory().send_with_retry()

        assert len(transport.calls) == 2
        assert response.json == {"done": True}
        mock_sleep.assert_called_once()
        assert 0 < mock_sleep.call_args[0][0] <= 2.01

    def test_missing_reset_header_warns_once(self, request_factory, transport, make_json_response) -> None:
        transport.queue(RawResponse(status_code=429, text="{}"), make_json_response({"done": True}))

        with patch("foundation.rate_limiter.logger") as mock_logger, patch("foundation.rate_limiter.time.sleep"):
            response = request_factory().send_with_retry()

        assert response.json == {"done": True}
        mock_logger.warning.assert_called_once_with("Rate limited without reset header, retrying immediately")

    def test_second_rate_limit_is_returned(self, request_factory, transport, make_rate_limited_response) -> None:
        transport.queue(make_rate_limited_response(), make_rate_limited_response())

        with patch("foundation.rate_limiter.time.sleep"):
            response = request_factory().send_with_retry()

        assert len(transport.calls) == 2
        assert response.status_code == 429

    def test_success_is_not_retried(self, request_factory, transport, make_json_response) -> None:
        transport.queue(make_json_response({"done": True}))

        with patch("foundation.rate_limiter.time.sleep") as mock_sleep:
            response = request_factory().send_with_retry()

        assert response.ok
        assert len(transport.calls) == 1
        mock_sleep.assert_not_called()

    def test_other_errors_are_not_retried(self, request_factory, transport, make_json_response) -> None:
        transport.queue(make_json_response({"error": "boom"}, status_code=503))

        response = request_factory().send_with_retry()

        assert response.status_code == 503
        assert len(transport.calls) == 1
