"""Dependency injection infrastructure for the query engine.

This package provides the registration builder, the options layer and a
reference container:
- ServiceDescriptor, ServiceLifetime: One registration intent and its lifetime
- ServiceCollection: Ordered ledger of descriptors
- ServiceProvider, ServiceScope: Reference container resolving a ledger
- OptionsChain: Default and explicit contributors of one option type
- QueryEngineBuilderBase, ServiceCollectionBuilder: Fluent registration API
  and the default bootstrap sequence
"""

from queryforge.di.builder import Lifetime, QueryEngineBuilderBase
from queryforge.di.collection import ServiceCollection
from queryforge.di.collection_builder import ServiceCollectionBuilder
from queryforge.di.descriptor import ServiceDescriptor
from queryforge.di.extensions import (
    add_complexity_analyzer,
    add_document_cache,
    add_error_info_provider,
    add_execution_options_configurator,
    add_json_writer,
    add_memory_cache,
    add_query_engine,
)
from queryforge.di.lifetime import ServiceLifetime
from queryforge.di.options import (
    OptionsAction,
    OptionsChain,
    OptionsChainKey,
    check_action,
    configure_option_defaults,
    configure_options,
    ensure_options_chain,
    find_options_chain,
)
from queryforge.di.protocols import ServiceRegistry, ServiceResolver
from queryforge.di.provider import ServiceProvider, ServiceScope

__all__ = [
    # Registration
    "Lifetime",
    "QueryEngineBuilderBase",
    "ServiceCollection",
    "ServiceCollectionBuilder",
    "ServiceDescriptor",
    "ServiceLifetime",
    "ServiceRegistry",
    # Options
    "OptionsAction",
    "OptionsChain",
    "OptionsChainKey",
    "check_action",
    "configure_option_defaults",
    "configure_options",
    "ensure_options_chain",
    "find_options_chain",
    # Resolution
    "ServiceProvider",
    "ServiceResolver",
    "ServiceScope",
    # Extensions
    "add_complexity_analyzer",
    "add_document_cache",
    "add_error_info_provider",
    "add_execution_options_configurator",
    "add_json_writer",
    "add_memory_cache",
    "add_query_engine",
]
