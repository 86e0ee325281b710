"""Base configuration class for option types.

Option types are resolved through the options layer: the container creates a
default instance, then every registered contributor mutates it in turn. This
module provides the pydantic base those types share so that every mutation is
validated as it happens.
"""

from __future__ import annotations

import os
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict


class BaseOptionsConfiguration(BaseModel):
    """Base class for all option types configured through the builder.

    Features:
        - Pydantic validation for type safety
        - Validate on assignment, so contributors cannot store bad values
        - Strict validation (no extra fields allowed)
        - from_properties() factory method for dictionary-based creation

    Unlike service configurations, option types are NOT frozen: the options
    layer composes contributors by mutating one instance in place.

    Example:
        ```python
        class CacheOptions(BaseOptionsConfiguration):
            max_entries: int = 100

        options = CacheOptions.from_properties({"max_entries": 500})
        options.max_entries = 1000  # validated
        ```

    """

    model_config = ConfigDict(
        # Strict - extra fields not in the model are rejected
        extra="forbid",
        # Contributors mutate instances, every assignment is validated
        validate_assignment=True,
    )

    # Prefix for environment variables read by from_properties() in subclasses
    env_prefix: ClassVar[str] = ""

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create configuration from properties dictionary with validation.

        Subclasses that declare ``env_prefix`` fall back to environment
        variables named ``{env_prefix}{FIELD_NAME}`` for every field missing
        from ``properties``. Explicit properties always win.

        Args:
            properties: Dictionary containing configuration properties

        Returns:
            Validated configuration instance

        Raises:
            ValidationError: If properties are invalid or contain unknown fields

        """
        config_data = properties.copy()
        prefix = cls.env_prefix
        if prefix:
            for name in cls.model_fields:
                if name in config_data:
                    continue
                value = os.getenv(f"{prefix}{name.upper()}")
                if value:
                    config_data[name] = value
        return cls.model_validate(config_data)
