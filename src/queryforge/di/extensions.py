"""Convenience registrations layered on the builder primitives.

Each helper is an ordinary sequence of builder calls and returns the builder,
so helpers chain with the builder's own methods:

    builder = add_query_engine(services)
    add_json_writer(builder)
    add_complexity_analyzer(builder, limit_depth).configure(AppOptions, load_app)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from queryforge.di.builder import QueryEngineBuilderBase
from queryforge.di.collection_builder import ServiceCollectionBuilder
from queryforge.di.lifetime import ServiceLifetime
from queryforge.di.options import OptionsAction
from queryforge.di.protocols import ServiceRegistry, ServiceResolver
from queryforge.errors import InvalidArgumentError
from queryforge.execution.complexity import COMPLEXITY_FIELDS, ComplexityConfiguration
from queryforge.execution.document import DocumentCache, MemoryDocumentCache
from queryforge.execution.error_info import ErrorInfoProvider, ErrorInfoProviderOptions
from queryforge.execution.options import ExecutionOptions, ExecutionOptionsConfigurator
from queryforge.execution.writer import DocumentWriter, JsonDocumentWriter


def add_query_engine(
    services: ServiceRegistry,
    configure: Callable[[ServiceCollectionBuilder], Any] | None = None,
) -> ServiceCollectionBuilder:
    """Create a builder over ``services`` with the default services registered.

    Args:
        services: Ledger receiving the registrations
        configure: Optional callback receiving the builder before it is returned

    Returns:
        The builder, for further chaining

    """
    builder = ServiceCollectionBuilder(services)
    if configure is not None:
        configure(builder)
    return builder


def add_json_writer[B: QueryEngineBuilderBase](builder: B, *, indent: int | None = None) -> B:
    """Register JsonDocumentWriter as the DocumentWriter."""
    if indent is None:
        return builder.register_type(DocumentWriter, JsonDocumentWriter, ServiceLifetime.SINGLETON)
    return builder.register_factory(
        DocumentWriter, _json_writer_factory(indent), ServiceLifetime.SINGLETON
    )


def add_document_cache[B: QueryEngineBuilderBase](builder: B, cache: DocumentCache) -> B:
    """Register a shared, thread-safe document cache instance."""
    return builder.register_instance(DocumentCache, cache)


def add_memory_cache[B: QueryEngineBuilderBase](builder: B, max_entries: int = 100) -> B:
    """Register a MemoryDocumentCache holding up to ``max_entries`` documents."""
    return add_document_cache(builder, MemoryDocumentCache(max_entries))


def add_complexity_analyzer[B: QueryEngineBuilderBase](
    builder: B,
    action: OptionsAction[ComplexityConfiguration] | None = None,
    *,
    properties: dict[str, Any] | None = None,
) -> B:
    """Configure the ambient complexity limits applied to every execution.

    The values of ``properties``, with ``QUERYFORGE_COMPLEXITY_*``
    environment variables as fallback, become default contributions; then
    ``action`` runs as an explicit contribution.

    Raises:
        ValidationError: If properties or environment values are invalid

    """
    baseline = ComplexityConfiguration.from_properties(properties or {})

    def apply_baseline(options: ComplexityConfiguration, services: ServiceResolver) -> None:
        for name in COMPLEXITY_FIELDS:
            if not baseline.is_unset(name):
                setattr(options, name, getattr(baseline, name))

    builder.configure_defaults(ComplexityConfiguration, apply_baseline)
    return builder.configure(ComplexityConfiguration, action)


def add_error_info_provider[B: QueryEngineBuilderBase](
    builder: B, action: OptionsAction[ErrorInfoProviderOptions] | None = None
) -> B:
    """Configure how errors are exposed by the default ErrorInfoProvider."""
    return builder.configure(ErrorInfoProviderOptions, action)


def add_execution_options_configurator[B: QueryEngineBuilderBase](
    builder: B, configurator: Callable[[ExecutionOptions], None]
) -> B:
    """Register a contributor run on every execution's options.

    Raises:
        InvalidArgumentError: If the configurator is None or not callable

    """
    if configurator is None or not callable(configurator):
        raise InvalidArgumentError("configurator must be a callable")
    return builder.register_instance(ExecutionOptionsConfigurator, configurator)


def _json_writer_factory(indent: int) -> Callable[[ServiceResolver], JsonDocumentWriter]:
    def create(services: ServiceResolver) -> JsonDocumentWriter:
        return JsonDocumentWriter(services.get_service(ErrorInfoProvider), indent=indent)

    return create
