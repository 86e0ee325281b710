"""Protocols for the container capabilities the builder relies on."""

from collections.abc import Iterator
from typing import Any, Protocol

from queryforge.di.descriptor import ServiceDescriptor


class ServiceResolver(Protocol):
    """Protocol for request-scoped service resolution.

    This is the only capability option contributors and the complexity merge
    receive: look a service up by key, get ``None`` when nothing is registered.

    Example:
        ```python
        def configure_limits(options: ComplexityConfiguration, services: ServiceResolver) -> None:
            settings = services.get_service(AppSettings)
            if settings is not None:
                options.max_depth = settings.max_depth
        ```

    """

    def get_service(self, service_type: Any) -> Any | None:
        """Get the service registered for ``service_type``, or None."""
        ...


class ServiceRegistry(Protocol):
    """Protocol for the ledger a builder writes registrations into.

    Builders append descriptors and scan the existing ones; they never remove
    or reorder entries. Any object that can do both can back a builder.
    """

    def add(self, descriptor: ServiceDescriptor[Any]) -> None:
        """Append a descriptor."""
        ...

    def __iter__(self) -> Iterator[ServiceDescriptor[Any]]:
        """Iterate descriptors in registration order."""
        ...
