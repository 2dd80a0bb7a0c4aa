"""Parameter validation for keyword-style constructors.

`Interface` names an operation and the keyword parameters it requires. It
checks a set of keyword arguments up front and reports every missing and
unexpected name in a single `IllegalArgumentError`.

## Usage

```python
from core.validation import Interface

DISCOVERY = Interface("Discovery", required=("name", "version", "resource", "method"))

DISCOVERY.validate({"name": "chat", "version": "v1"})
# IllegalArgumentError: Invalid parameters for Discovery: missing required
# parameter(s): resource, method
```
"""

from collections.abc import Iterable, Mapping
from typing import Any

import attrs

from .exceptions import IllegalArgumentError


@attrs.define(frozen=True, slots=True)
class Interface:
    """Named parameter contract.

    Attributes:
        name: Operation name used in error messages.
        required: Parameters that must be present and not None.
        optional: Parameters that may be present.
    """

    name: str
    required: tuple[str, ...] = attrs.field(converter=tuple)
    optional: tuple[str, ...] = attrs.field(default=(), converter=tuple)

    def missing(self, kwargs: Mapping[str, Any]) -> list[str]:
        return [key for key in self.required if kwargs.get(key) is None]

    def unexpected(self, kwargs: Mapping[str, Any]) -> list[str]:
        accepted = set(self.required) | set(self.optional)
        return [key for key in kwargs if key not in accepted]

    def validate(self, kwargs: Mapping[str, Any]) -> None:
        """Check `kwargs` against the contract.

        Raises:
            IllegalArgumentError: If any required parameter is missing or any
                unexpected parameter is present. Both lists are reported
                together.
        """
        missing = self.missing(kwargs)
        unexpected = self.unexpected(kwargs)
        if not missing and not unexpected:
            return

        problems: list[str] = []
        if missing:
            problems.append(f"missing required parameter(s): {_join(missing)}")
        if unexpected:
            problems.append(f"unexpected parameter(s): {_join(unexpected)}")
        msg = f"Invalid parameters for {self.name}: {'; '.join(problems)}"
        raise IllegalArgumentError(msg, missing=missing, unexpected=unexpected)


def _join(names: Iterable[str]) -> str:
    return ", ".join(names)
