"""QueryForge - registration builder and options layer for a query engine.

This package wires the services a query execution engine needs into a
dependency injection ledger, composes option types from ordered
contributors, and reconciles per-execution complexity limits with the
ambient configuration.
"""

__version__ = "0.1.0"

from queryforge.configuration import BaseOptionsConfiguration
from queryforge.di import (
    OptionsChain,
    QueryEngineBuilderBase,
    ServiceCollection,
    ServiceCollectionBuilder,
    ServiceDescriptor,
    ServiceLifetime,
    ServiceProvider,
    ServiceResolver,
    add_query_engine,
)
from queryforge.errors import (
    ComplexityError,
    DocumentParseError,
    DocumentValidationError,
    ExecutionFailure,
    InvalidArgumentError,
    InvalidOperationError,
    InvalidRangeError,
    QueryForgeError,
)
from queryforge.execution import (
    ComplexityConfiguration,
    DocumentExecuter,
    DocumentWriter,
    ErrorInfoProviderOptions,
    ExecutionOptions,
    ExecutionResult,
    merge_complexity_configuration,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "BaseOptionsConfiguration",
    "ComplexityConfiguration",
    "ErrorInfoProviderOptions",
    # Dependency Injection
    "OptionsChain",
    "QueryEngineBuilderBase",
    "ServiceCollection",
    "ServiceCollectionBuilder",
    "ServiceDescriptor",
    "ServiceLifetime",
    "ServiceProvider",
    "ServiceResolver",
    "add_query_engine",
    # Execution
    "DocumentExecuter",
    "DocumentWriter",
    "ExecutionOptions",
    "ExecutionResult",
    "merge_complexity_configuration",
    # Errors
    "QueryForgeError",
    "ComplexityError",
    "DocumentParseError",
    "DocumentValidationError",
    "ExecutionFailure",
    "InvalidArgumentError",
    "InvalidOperationError",
    "InvalidRangeError",
]
