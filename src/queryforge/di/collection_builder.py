"""Builder writing registrations into a service ledger."""

from __future__ import annotations

import logging
from typing import Any, Self

from queryforge.di.builder import Lifetime, QueryEngineBuilderBase
from queryforge.di.descriptor import ServiceDescriptor
from queryforge.di.options import (
    OptionsAction,
    OptionsChain,
    configure_option_defaults,
    configure_options,
    ensure_options_chain,
    find_options_chain,
)
from queryforge.di.protocols import ServiceRegistry
from queryforge.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


class ServiceCollectionBuilder(QueryEngineBuilderBase):
    """Query engine builder over a ServiceRegistry such as ServiceCollection.

    The ledger is shared: descriptors added directly to it, before or after
    the builder was created, are visible to the builder's existence checks.
    Option chains live in the ledger too, so several builders over one ledger
    and direct ``ServiceCollection.configure`` calls all compose.
    The default services are registered when the builder is constructed.

    Example:
        ```python
        services = ServiceCollection()
        builder = ServiceCollectionBuilder(services)
        builder.configure(ComplexityConfiguration, limit_depth)
        provider = services.build_service_provider()
        executer = provider.get_required_service(DocumentExecuter)
        ```

    """

    def __init__(self, services: ServiceRegistry) -> None:
        """Initialise the builder and register the default services.

        Args:
            services: Ledger receiving the registrations

        Raises:
            InvalidArgumentError: If services is None

        """
        if services is None:
            raise InvalidArgumentError("services is required")
        super().__init__()
        self.services = services
        self.initialize()

    def register_type(
        self, service_type: Any, implementation_type: type, lifetime: Lifetime
    ) -> Self:
        self.services.add(ServiceDescriptor.for_type(service_type, implementation_type, lifetime))
        return self

    def register_factory(self, service_type: Any, factory: Any, lifetime: Lifetime) -> Self:
        self.services.add(ServiceDescriptor.for_factory(service_type, factory, lifetime))
        return self

    def register_instance(self, service_type: Any, instance: object) -> Self:
        self.services.add(ServiceDescriptor.for_instance(service_type, instance))
        return self

    def try_register_type(
        self, service_type: Any, implementation_type: type, lifetime: Lifetime
    ) -> Self:
        self._try_add(ServiceDescriptor.for_type(service_type, implementation_type, lifetime))
        return self

    def try_register_factory(self, service_type: Any, factory: Any, lifetime: Lifetime) -> Self:
        self._try_add(ServiceDescriptor.for_factory(service_type, factory, lifetime))
        return self

    def try_register_instance(self, service_type: Any, instance: object) -> Self:
        self._try_add(ServiceDescriptor.for_instance(service_type, instance))
        return self

    def configure[T](
        self, options_type: type[T], action: OptionsAction[T] | None = None
    ) -> Self:
        configure_options(self.services, options_type, action)
        return self

    def configure_defaults[T](
        self, options_type: type[T], action: OptionsAction[T] | None = None
    ) -> Self:
        configure_option_defaults(self.services, options_type, action)
        return self

    def ensure_options(self, options_type: type) -> Self:
        ensure_options_chain(self.services, options_type)
        return self

    def options_chain[T](self, options_type: type[T]) -> OptionsChain[T] | None:
        """Get the contributor chain of ``options_type``, if one was started."""
        return find_options_chain(self.services, options_type)

    def _try_add(self, descriptor: ServiceDescriptor[Any]) -> bool:
        # Linear scan: entries added outside the builder count as well
        for existing in self.services:
            if existing.service_type == descriptor.service_type:
                logger.debug(
                    "Kept existing registration for %s", descriptor.service_name
                )
                return False
        self.services.add(descriptor)
        return True
