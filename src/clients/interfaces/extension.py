"""Request extension point.

Wrappers that need to adjust every request they produce (add tracing headers,
rewrite urls, post-process responses) pass a `RequestExtension` to the
request builder. The request holds a reference to it and calls its hooks
around each send.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from clients.request import Request
    from clients.response import Response


class RequestExtension:
    """Base class for request extensions.

    Both hooks pass values through unchanged; subclasses override the ones
    they need.

    Example:
        ```python
        class UserAgent(RequestExtension):
            def before_send(self, request, url, options):
                options["headers"]["User-Agent"] = "chat-bot/1.0"
                return url, options

        client.get({"name": "spaces/AAA"}, extension=UserAgent())
        ```
    """

    def before_send(
        self, request: "Request", url: str, options: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        """Adjust the materialized url and transport options before sending."""
        return url, options

    def after_response(self, request: "Request", response: "Response") -> "Response":
        """Inspect or replace the response after it is received."""
        return response
