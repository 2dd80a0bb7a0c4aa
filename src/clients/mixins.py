"""Mixins for client classes.

This module provides small mixins shared by the request layer classes:
automatic logger creation and config validation for `from_config()`
constructors.
"""

import logging
from typing import Any

from core.exceptions import IllegalArgumentError


class ConfigValidationMixin:
    """Mixin for classes that support configuration-based instantiation."""

    @classmethod
    def _validate_config(cls, config: Any, required_fields: list[str]) -> None:
        """Validate that `config` carries every required field.

        Args:
            config: Configuration object (pydantic model or any object with
                attributes).
            required_fields: Attribute names that must be set and non-empty.

        Raises:
            IllegalArgumentError: Listing every missing field at once.

        Example:
            ```python
            @classmethod
            def from_config(cls, service: str, config: OAuthConfig) -> "ServiceAccountTokenSource":
                cls._validate_config(config, ["issuer_email", "private_key", "scopes"])
                ...
            ```
        """
        missing = [f for f in required_fields if not getattr(config, f, None)]
        if missing:
            msg = f"{cls.__name__} requires: {', '.join(missing)}"
            raise IllegalArgumentError(msg, missing=missing)


class LoggerMixin:
    """Mixin that provides automatic logger creation for client classes.

    The logger is named after the defining module and is available as
    `self._logger` or `cls._logger`.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._logger = logging.getLogger(cls.__module__)  # type: ignore[attr-defined]
