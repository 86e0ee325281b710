"""Service descriptors: one registration intent for the container."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_type_hints

from queryforge.di.lifetime import ServiceLifetime
from queryforge.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass
class ServiceDescriptor[T]:
    """Descriptor for a service registration with lifetime configuration.

    Exactly one of the three implementation attributes is populated. Build
    descriptors through ``for_type``, ``for_factory`` or ``for_instance``,
    which validate their arguments before anything reaches a ledger.

    Attributes:
        service_type: The key the service is registered under
        lifetime: How long produced instances are reused
        implementation_type: Class constructed by the container
        implementation_factory: Callable receiving the resolving scope
        implementation_instance: Pre-built object (always singleton)

    """

    service_type: Any
    lifetime: ServiceLifetime
    implementation_type: type[T] | None = None
    implementation_factory: Callable[[Any], T] | None = None
    implementation_instance: T | None = None

    def __post_init__(self) -> None:
        populated = sum(
            value is not None
            for value in (
                self.implementation_type,
                self.implementation_factory,
                self.implementation_instance,
            )
        )
        if populated != 1:
            raise InvalidArgumentError(
                "Exactly one of implementation_type, implementation_factory "
                "or implementation_instance must be provided"
            )

    @property
    def service_name(self) -> str:
        """Readable name of the service key, for logs and messages."""
        return _name_of(self.service_type)

    @classmethod
    def for_type(
        cls,
        service_type: Any,
        implementation_type: type[T],
        lifetime: ServiceLifetime | int | str = ServiceLifetime.SINGLETON,
    ) -> ServiceDescriptor[T]:
        """Describe a class the container constructs for ``service_type``.

        Raises:
            InvalidArgumentError: If an argument is None, or the implementation is
                not a class assignable to the service type
            InvalidRangeError: If the lifetime is not recognised

        """
        _require_key(service_type)
        if implementation_type is None:
            raise InvalidArgumentError("implementation_type is required")
        parsed = ServiceLifetime.parse(lifetime)
        if not inspect.isclass(implementation_type):
            raise InvalidArgumentError(
                f"implementation_type must be a class, got {implementation_type!r}"
            )
        if _is_checkable_class(service_type) and not issubclass(
            implementation_type, service_type
        ):
            raise InvalidArgumentError(
                f"Implementation {implementation_type.__name__} must be a subclass "
                f"of {service_type.__name__}"
            )
        return cls(service_type, parsed, implementation_type=implementation_type)

    @classmethod
    def for_factory(
        cls,
        service_type: Any,
        factory: Callable[[Any], T],
        lifetime: ServiceLifetime | int | str = ServiceLifetime.SINGLETON,
    ) -> ServiceDescriptor[T]:
        """Describe a factory invoked with the resolving scope.

        When the factory declares a class return annotation, that class must be
        assignable to ``service_type``.

        Raises:
            InvalidArgumentError: If an argument is None, the factory is not
                callable, or its declared return type does not fit the key
            InvalidRangeError: If the lifetime is not recognised

        """
        _require_key(service_type)
        if factory is None:
            raise InvalidArgumentError("implementation_factory is required")
        parsed = ServiceLifetime.parse(lifetime)
        if not callable(factory):
            raise InvalidArgumentError(f"implementation_factory must be callable, got {factory!r}")
        returns = _declared_return_type(factory)
        if (
            inspect.isclass(returns)
            and _is_checkable_class(service_type)
            and not issubclass(returns, service_type)
        ):
            raise InvalidArgumentError(
                f"Factory return type {returns.__name__} is not assignable "
                f"to {service_type.__name__}"
            )
        return cls(service_type, parsed, implementation_factory=factory)

    @classmethod
    def for_instance(cls, service_type: Any, instance: T) -> ServiceDescriptor[T]:
        """Describe a pre-built instance, registered with singleton lifetime.

        Raises:
            InvalidArgumentError: If an argument is None or the instance does not
                belong to the service type

        """
        _require_key(service_type)
        if instance is None:
            raise InvalidArgumentError("implementation_instance is required")
        if _is_checkable_class(service_type) and not isinstance(instance, service_type):
            raise InvalidArgumentError(
                f"Instance of {type(instance).__name__} is not a {service_type.__name__}"
            )
        return cls(service_type, ServiceLifetime.SINGLETON, implementation_instance=instance)


def _require_key(service_type: Any) -> None:
    if service_type is None:
        raise InvalidArgumentError("service_type is required")


def _name_of(service_type: Any) -> str:
    return getattr(service_type, "__name__", repr(service_type))


def _is_checkable_class(service_type: Any) -> bool:
    # Protocols are matched structurally, issubclass/isinstance do not apply
    return inspect.isclass(service_type) and not getattr(service_type, "_is_protocol", False)


def _declared_return_type(factory: Callable[..., Any]) -> Any:
    try:
        return get_type_hints(factory).get("return")
    except (NameError, TypeError) as exc:
        logger.debug("Cannot read return annotation of %r: %s", factory, exc)
        return None
