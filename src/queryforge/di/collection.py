"""Service collection: the ordered ledger of registration intents."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any, Self

from queryforge.di.descriptor import ServiceDescriptor
from queryforge.di.options import OptionsAction, configure_option_defaults, configure_options
from queryforge.di.provider import ServiceProvider

logger = logging.getLogger(__name__)


class ServiceCollection:
    """Append-only, ordered list of service descriptors.

    The collection records intents; it never resolves anything. Several
    descriptors may target the same key, in which case the container uses the
    last one for single resolution and all of them for enumeration.

    Example:
        ```python
        services = ServiceCollection()
        services.add(ServiceDescriptor.for_type(Cache, MemoryCache))
        builder = ServiceCollectionBuilder(services)
        provider = services.build_service_provider()
        ```

    """

    def __init__(self) -> None:
        """Initialise an empty collection."""
        self._descriptors: list[ServiceDescriptor[Any]] = []

    def add(self, descriptor: ServiceDescriptor[Any]) -> None:
        """Append a descriptor unconditionally.

        Args:
            descriptor: Registration intent to record

        """
        self._descriptors.append(descriptor)
        logger.debug(
            "Added service: %s with lifetime: %s",
            descriptor.service_name,
            descriptor.lifetime.name,
        )

    def try_add(self, descriptor: ServiceDescriptor[Any]) -> bool:
        """Append a descriptor only if its service type is not registered yet.

        Args:
            descriptor: Registration intent to record

        Returns:
            True if the descriptor was appended, False if an entry already
            targets the same service type.

        """
        if self.contains(descriptor.service_type):
            logger.debug(
                "Skipped service: %s (already registered)", descriptor.service_name
            )
            return False
        self.add(descriptor)
        return True

    def contains(self, service_type: Any) -> bool:
        """Check whether any descriptor targets ``service_type``."""
        return any(d.service_type == service_type for d in self._descriptors)

    def configure[T](self, options_type: type[T], action: OptionsAction[T] | None = None) -> Self:
        """Add an explicit contributor for ``options_type``.

        Contributions made here and through any builder over this collection
        extend the same chain.

        Raises:
            InvalidArgumentError: If options_type is not a class or the action
                is not callable

        """
        configure_options(self, options_type, action)
        return self

    def configure_defaults[T](
        self, options_type: type[T], action: OptionsAction[T] | None = None
    ) -> Self:
        """Add a default contributor for ``options_type``, run before explicit ones."""
        configure_option_defaults(self, options_type, action)
        return self

    def build_service_provider(self) -> ServiceProvider:
        """Create a provider over a snapshot of the current descriptors."""
        return ServiceProvider(list(self._descriptors))

    def __iter__(self) -> Iterator[ServiceDescriptor[Any]]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)
