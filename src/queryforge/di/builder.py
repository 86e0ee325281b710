"""Fluent registration builder and its bootstrap sequence.

The builder turns registration calls into descriptors for an external
container and collects option contributors per option type. Concrete builders
decide where descriptors go; this base supplies the conveniences and the
default registrations every query engine needs.
"""

from __future__ import annotations

import abc
import inspect
import logging
from typing import Any, Self

from queryforge.di.lifetime import ServiceLifetime
from queryforge.di.options import OptionsAction
from queryforge.di.protocols import ServiceResolver
from queryforge.errors import InvalidArgumentError, InvalidOperationError
from queryforge.execution.complexity import (
    ComplexityAnalyzer,
    ComplexityConfiguration,
    DefaultComplexityAnalyzer,
    merge_complexity_configuration,
)
from queryforge.execution.document import (
    DefaultDocumentBuilder,
    DefaultDocumentCache,
    DocumentBuilder,
    DocumentCache,
)
from queryforge.execution.error_info import (
    DefaultErrorInfoProvider,
    ErrorInfoProvider,
    ErrorInfoProviderOptions,
)
from queryforge.execution.executer import DefaultDocumentExecuter, DocumentExecuter
from queryforge.execution.options import ExecutionOptionsConfigurator
from queryforge.execution.validation import DefaultDocumentValidator, DocumentValidator
from queryforge.execution.writer import DocumentWriter

logger = logging.getLogger(__name__)

type Lifetime = ServiceLifetime | int | str


class QueryEngineBuilderBase(abc.ABC):
    """Base class for query engine builders.

    Subclasses implement the registration primitives against a concrete
    ledger; every primitive validates its arguments before recording
    anything, so a failed call leaves the ledger unchanged. All methods
    return the builder so calls can be chained:

        builder.register(Cache, MemoryCache).configure(CacheOptions, set_size)
    """

    def __init__(self) -> None:
        self._initialized = False

    # Registration primitives

    @abc.abstractmethod
    def register_type(
        self, service_type: Any, implementation_type: type, lifetime: Lifetime
    ) -> Self:
        """Register a class constructed by the container. Always appends."""

    @abc.abstractmethod
    def register_factory(
        self, service_type: Any, factory: Any, lifetime: Lifetime
    ) -> Self:
        """Register a factory called with the resolving scope. Always appends."""

    @abc.abstractmethod
    def register_instance(self, service_type: Any, instance: object) -> Self:
        """Register a pre-built singleton instance. Always appends."""

    @abc.abstractmethod
    def try_register_type(
        self, service_type: Any, implementation_type: type, lifetime: Lifetime
    ) -> Self:
        """Register a class unless ``service_type`` is already registered."""

    @abc.abstractmethod
    def try_register_factory(
        self, service_type: Any, factory: Any, lifetime: Lifetime
    ) -> Self:
        """Register a factory unless ``service_type`` is already registered."""

    @abc.abstractmethod
    def try_register_instance(self, service_type: Any, instance: object) -> Self:
        """Register an instance unless ``service_type`` is already registered."""

    # Options primitives

    @abc.abstractmethod
    def configure[T](
        self, options_type: type[T], action: OptionsAction[T] | None = None
    ) -> Self:
        """Add an explicit contributor for ``options_type``.

        Explicit contributors run after every default contributor, in the
        order they were added. Passing None only ensures the options type is
        registered.
        """

    @abc.abstractmethod
    def configure_defaults[T](
        self, options_type: type[T], action: OptionsAction[T] | None = None
    ) -> Self:
        """Add a default contributor for ``options_type``.

        Default contributors run before any explicit contributor, whatever
        the call order. Passing None only ensures the options type is
        registered.
        """

    @abc.abstractmethod
    def ensure_options(self, options_type: type) -> Self:
        """Make ``options_type`` resolvable without adding a contributor."""

    # Conveniences

    def register(
        self,
        service_type: Any,
        implementation: Any,
        lifetime: Lifetime = ServiceLifetime.SINGLETON,
    ) -> Self:
        """Register an implementation, choosing the shape from its value.

        A class is registered as an implementation type, any other callable as
        a factory, and anything else as a singleton instance. Use
        ``register_instance`` to register a callable object as an instance;
        execution options configurators have ``add_execution_options_configurator``.

        Raises:
            InvalidArgumentError: If an argument is None, an instance is given
                a lifetime other than singleton, or a function is keyed by a
                callable protocol such as ExecutionOptionsConfigurator
            InvalidRangeError: If the lifetime is not recognised

        """
        return self._dispatch(service_type, implementation, lifetime, try_only=False)

    def try_register(
        self,
        service_type: Any,
        implementation: Any,
        lifetime: Lifetime = ServiceLifetime.SINGLETON,
    ) -> Self:
        """Like ``register``, but skips keys that are already registered."""
        return self._dispatch(service_type, implementation, lifetime, try_only=True)

    def register_self(
        self, service_type: type, lifetime: Lifetime = ServiceLifetime.SINGLETON
    ) -> Self:
        """Register a concrete class as its own implementation."""
        return self.register_type(service_type, service_type, lifetime)

    def try_register_self(
        self, service_type: type, lifetime: Lifetime = ServiceLifetime.SINGLETON
    ) -> Self:
        """Register a concrete class as its own implementation, unless registered."""
        return self.try_register_type(service_type, service_type, lifetime)

    def _dispatch(
        self, service_type: Any, implementation: Any, lifetime: Lifetime, *, try_only: bool
    ) -> Self:
        if service_type is None:
            raise InvalidArgumentError("service_type is required")
        if implementation is None:
            raise InvalidArgumentError("implementation is required")
        parsed = ServiceLifetime.parse(lifetime)

        if inspect.isclass(implementation):
            register = self.try_register_type if try_only else self.register_type
            return register(service_type, implementation, parsed)
        if callable(implementation):
            if _is_callable_protocol(service_type):
                raise InvalidArgumentError(
                    f"Cannot tell whether {implementation!r} is a factory or an instance "
                    f"of the callable protocol {service_type.__name__}; use "
                    "register_instance or register_factory"
                )
            register = self.try_register_factory if try_only else self.register_factory
            return register(service_type, implementation, parsed)
        if parsed != ServiceLifetime.SINGLETON:
            raise InvalidArgumentError(
                f"Instances are always singletons, cannot register with {parsed.name}"
            )
        register = self.try_register_instance if try_only else self.register_instance
        return register(service_type, implementation)

    # Bootstrap

    def initialize(self) -> None:
        """Register the default services and option types.

        Defaults use try-registration, so services registered earlier on the
        same ledger are kept. Runs once per builder; later calls do nothing.
        """
        if self._initialized:
            return
        self._initialized = True

        self.try_register_factory(
            DocumentWriter, _missing_document_writer, ServiceLifetime.TRANSIENT
        )
        self.try_register_type(
            DocumentExecuter, DefaultDocumentExecuter, ServiceLifetime.SINGLETON
        )
        self.try_register_type(
            DocumentBuilder, DefaultDocumentBuilder, ServiceLifetime.SINGLETON
        )
        self.try_register_type(
            DocumentValidator, DefaultDocumentValidator, ServiceLifetime.SINGLETON
        )
        self.try_register_type(
            ComplexityAnalyzer, DefaultComplexityAnalyzer, ServiceLifetime.SINGLETON
        )
        self.try_register_instance(DocumentCache, DefaultDocumentCache.INSTANCE)
        self.try_register_type(
            ErrorInfoProvider, DefaultErrorInfoProvider, ServiceLifetime.SINGLETON
        )

        self.register_instance(ExecutionOptionsConfigurator, merge_complexity_configuration)

        self.ensure_options(ComplexityConfiguration)
        self.ensure_options(ErrorInfoProviderOptions)
        logger.debug("%s initialized with default services", type(self).__name__)


def _is_callable_protocol(service_type: Any) -> bool:
    return (
        inspect.isclass(service_type)
        and getattr(service_type, "_is_protocol", False)
        and "__call__" in vars(service_type)
    )


def _missing_document_writer(services: ServiceResolver) -> DocumentWriter:
    raise InvalidOperationError(
        "No DocumentWriter is registered. Register one, for example with "
        "add_json_writer(builder), before resolving DocumentWriter."
    )
