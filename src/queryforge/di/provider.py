"""Reference service provider resolving the descriptors of a collection."""

from __future__ import annotations

import inspect
import logging
import threading
import types
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Union, get_args, get_origin, get_type_hints

from queryforge.di.descriptor import ServiceDescriptor
from queryforge.di.lifetime import ServiceLifetime
from queryforge.di.protocols import ServiceResolver
from queryforge.errors import InvalidOperationError

logger = logging.getLogger(__name__)

_ENUMERABLE_ORIGINS = (Iterable, Sequence, list)


class ServiceProvider:
    """Dependency injection container built from a list of descriptors.

    - last registration wins for ``get_service``
    - ``get_services`` returns every registration in ledger order
    - singletons are cached by the provider, scoped services by each scope
    - the provider itself acts as the root scope
    """

    def __init__(self, descriptors: Iterable[ServiceDescriptor[Any]]) -> None:
        """Initialise the provider.

        Args:
            descriptors: Registration intents, in registration order

        """
        self._registrations: dict[Any, list[tuple[int, ServiceDescriptor[Any]]]] = {}
        for index, descriptor in enumerate(descriptors):
            self._registrations.setdefault(descriptor.service_type, []).append(
                (index, descriptor)
            )
        self._singletons: dict[int, Any] = {}
        self._lock = threading.RLock()
        self._root = ServiceScope(self)
        logger.debug("ServiceProvider built with %d service types", len(self._registrations))

    def get_service(self, service_type: Any) -> Any | None:
        """Get a service from the root scope, or None if not registered."""
        return self._root.get_service(service_type)

    def get_services(self, service_type: Any) -> list[Any]:
        """Get every registered implementation of a service from the root scope."""
        return self._root.get_services(service_type)

    def get_required_service(self, service_type: Any) -> Any:
        """Get a service from the root scope.

        Raises:
            InvalidOperationError: If no service is registered for the type

        """
        return self._root.get_required_service(service_type)

    def create_scope(self) -> ServiceScope:
        """Create a scope with its own cache of scoped services."""
        return ServiceScope(self)

    def _singleton(self, index: int, create: Callable[[], Any]) -> Any:
        with self._lock:
            if index not in self._singletons:
                self._singletons[index] = create()
            return self._singletons[index]


class ServiceScope:
    """One resolution scope, typically a single request.

    Scoped services are created once per scope; singletons are shared with
    the owning provider; transient services are created on every call.
    """

    def __init__(self, provider: ServiceProvider) -> None:
        """Initialise a scope over ``provider``."""
        self._provider = provider
        self._scoped: dict[int, Any] = {}

    @property
    def service_provider(self) -> ServiceProvider:
        """The provider this scope belongs to."""
        return self._provider

    def get_service(self, service_type: Any) -> Any | None:
        """Get a service instance, or None if not registered.

        Args:
            service_type: The key of the service to retrieve

        Returns:
            Instance from the last registration for the key; the scope itself
            for ``ServiceResolver`` unless something else is registered.

        """
        entries = self._provider._registrations.get(service_type)
        if not entries:
            if service_type in (ServiceResolver, ServiceScope):
                return self
            return None
        index, descriptor = entries[-1]
        return self._resolve(index, descriptor)

    def get_services(self, service_type: Any) -> list[Any]:
        """Get one instance per registration of ``service_type``, in order."""
        entries = self._provider._registrations.get(service_type, [])
        return [self._resolve(index, descriptor) for index, descriptor in entries]

    def get_required_service(self, service_type: Any) -> Any:
        """Get a service instance.

        Raises:
            InvalidOperationError: If no service is registered for the type

        """
        service = self.get_service(service_type)
        if service is None:
            name = getattr(service_type, "__name__", repr(service_type))
            raise InvalidOperationError(f"No service registered for type {name}")
        return service

    def _resolve(self, index: int, descriptor: ServiceDescriptor[Any]) -> Any:
        if descriptor.implementation_instance is not None:
            return descriptor.implementation_instance

        if descriptor.lifetime == ServiceLifetime.SINGLETON:
            root = self._provider._root
            return self._provider._singleton(index, lambda: root._create(descriptor))

        if descriptor.lifetime == ServiceLifetime.SCOPED:
            with self._provider._lock:
                if index not in self._scoped:
                    self._scoped[index] = self._create(descriptor)
                return self._scoped[index]

        return self._create(descriptor)

    def _create(self, descriptor: ServiceDescriptor[Any]) -> Any:
        logger.debug(
            "Creating %s service: %s",
            descriptor.lifetime.name.lower(),
            descriptor.service_name,
        )
        if descriptor.implementation_factory is not None:
            return descriptor.implementation_factory(self)
        assert descriptor.implementation_type is not None
        return self._construct(descriptor.implementation_type)

    def _construct(self, cls: type[Any]) -> Any:
        """Build ``cls`` by constructor injection from its ``__init__`` type hints."""
        hints = _init_type_hints(cls)
        kwargs: dict[str, Any] = {}
        for name, param in inspect.signature(cls.__init__).parameters.items():
            if name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            value = self._resolve_parameter(hints.get(name))
            if value is None:
                if param.default is not param.empty:
                    continue
                raise InvalidOperationError(
                    f"Cannot resolve parameter '{name}' of {cls.__name__}"
                )
            kwargs[name] = value
        return cls(**kwargs)

    def _resolve_parameter(self, hint: Any) -> Any | None:
        if hint is None:
            return None
        origin = get_origin(hint)
        if origin in _ENUMERABLE_ORIGINS:
            (item_type,) = get_args(hint)
            return self.get_services(item_type)
        if origin in (Union, types.UnionType):
            for option in get_args(hint):
                if option is type(None):
                    continue
                value = self._resolve_parameter(option)
                if value is not None:
                    return value
            return None
        return self.get_service(hint)


def _init_type_hints(cls: type[Any]) -> dict[str, Any]:
    try:
        return get_type_hints(cls.__init__)
    except (NameError, TypeError) as exc:
        logger.warning("Cannot read constructor type hints of %s: %s", cls.__name__, exc)
        return {}
