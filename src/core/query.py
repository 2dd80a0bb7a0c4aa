"""Query string encoding.

Turns a mapping of query parameters into the `?key=value&...` suffix appended
to request urls. List values repeat the key once per element, in list order.
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

# Characters left unescaped by JavaScript's encodeURIComponent, beyond the
# alphanumerics and "-_.~" that urllib.parse.quote always keeps.
_COMPONENT_SAFE = "!*'()"


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_component(value: Any) -> str:
    """Percent-encode a single query value.

    Args:
        value: Scalar value; booleans render as `true`/`false`, anything else
            through `str()`.

    Returns:
        The encoded value.
    """
    return quote(_render_value(value), safe=_COMPONENT_SAFE)


def encode_query(params: Mapping[str, Any] | None) -> str:
    """Encode parameters into a query string.

    Args:
        params: Mapping of parameter names to scalar values or lists of scalar
            values. `None` values are skipped.

    Returns:
        `""` when no pairs are produced, otherwise `"?"` followed by the
        `key=value` pairs joined with `&`, in mapping insertion order.

    Example:
        ```python
        encode_query({"q": "a b", "id": ["1", "2"]})
        # Returns: "?q=a%20b&id=1&id=2"
        ```
    """
    if not params:
        return ""

    pairs: list[str] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend(f"{key}={encode_component(item)}" for item in value)
        else:
            pairs.append(f"{key}={encode_component(value)}")

    if not pairs:
        return ""
    return "?" + "&".join(pairs)
