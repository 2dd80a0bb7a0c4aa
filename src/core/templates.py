"""URL template translation and interpolation.

Discovery documents describe paths with placeholders such as `{name}` or
`{+name}` (reserved expansion). This module rewrites those paths into a plain
`{identifier}` template and substitutes concrete values into it.

## Usage

```python
from core.templates import interpolate, to_template

template = to_template("https://chat.googleapis.com/v1/{+parent}/members/{member.id}")
# "https://chat.googleapis.com/v1/{parent}/members/{member_id}"

interpolate(template, {"parent": "spaces/AAA", "member_id": "42"})
# "https://chat.googleapis.com/v1/spaces/AAA/members/42"
```

## Design

Templates are parsed into an ordered tuple of literal and placeholder tokens
and rendered by concatenation. Values are inserted as raw strings with no
re-encoding; callers that need escaping must encode values themselves.
"""

import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

import attrs

from .exceptions import MissingInterpolationValueError

_DISCOVERY_PLACEHOLDER = re.compile(r"\{\+?([A-Za-z0-9_.]+)\}")
_TEMPLATE_PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_]+)\}")


@attrs.define(frozen=True, slots=True)
class Literal:
    """Fixed text between placeholders."""

    text: str


@attrs.define(frozen=True, slots=True)
class Placeholder:
    """Named slot filled in at interpolation time."""

    name: str


Token = Literal | Placeholder


def to_template(path: str) -> str:
    """Translate a discovery path into an interpolation template.

    Both `{name}` and `{+name}` become `{name}`. Dots inside a placeholder
    name are replaced by underscores so dot-nested parameters become valid
    identifiers (`{a.b}` becomes `{a_b}`).

    Args:
        path: Path or absolute url containing discovery-style placeholders.

    Returns:
        The rewritten template.
    """
    return _DISCOVERY_PLACEHOLDER.sub(lambda m: "{" + m.group(1).replace(".", "_") + "}", path)


@lru_cache(maxsize=256)
def parse_template(template: str) -> tuple[Token, ...]:
    """Split a template into literal and placeholder tokens.

    Args:
        template: Template produced by `to_template` (or written by hand).

    Returns:
        Tokens in template order. Empty literals are not emitted.
    """
    tokens: list[Token] = []
    position = 0
    for match in _TEMPLATE_PLACEHOLDER.finditer(template):
        if match.start() > position:
            tokens.append(Literal(template[position : match.start()]))
        tokens.append(Placeholder(match.group(1)))
        position = match.end()
    if position < len(template):
        tokens.append(Literal(template[position:]))
    return tuple(tokens)


def placeholder_names(template: str) -> tuple[str, ...]:
    """Return the placeholder names referenced by a template, in order."""
    return tuple(token.name for token in parse_template(template) if isinstance(token, Placeholder))


def interpolate(template: str, values: Mapping[str, Any]) -> str:
    """Substitute every placeholder in `template` with its value.

    Args:
        template: Template with `{identifier}` placeholders.
        values: Mapping of placeholder names to values. Values are inserted
            via `str()` without encoding. Extra keys are ignored.

    Returns:
        The rendered string.

    Raises:
        MissingInterpolationValueError: If a placeholder has no value.
    """
    parts: list[str] = []
    for token in parse_template(template):
        if isinstance(token, Literal):
            parts.append(token.text)
            continue
        if token.name not in values:
            raise MissingInterpolationValueError(token.name)
        parts.append(str(values[token.name]))
    return "".join(parts)
