"""Service lifetimes for dependency injection."""

from __future__ import annotations

from enum import IntEnum

from queryforge.errors import InvalidRangeError


class ServiceLifetime(IntEnum):
    """How long a produced instance is reused.

    Attributes:
        SINGLETON: Once per service provider
        SCOPED: Once per scope (one logical request)
        TRANSIENT: A new instance on every resolution

    """

    SINGLETON = 0
    SCOPED = 1
    TRANSIENT = 2

    @classmethod
    def parse(cls, value: ServiceLifetime | int | str) -> ServiceLifetime:
        """Validate a lifetime against the closed set of recognised values.

        Accepts a member, its integer value, or its name in any case
        (``"singleton"``, ``"Scoped"``...).

        Raises:
            InvalidRangeError: If the value is not a recognised lifetime

        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise InvalidRangeError(f"Unknown service lifetime: {value!r}") from None
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise InvalidRangeError(f"Unknown service lifetime: {value!r}") from None
        raise InvalidRangeError(f"Unknown service lifetime: {value!r}")
