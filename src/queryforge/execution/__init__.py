"""Execution pipeline: options, documents, validation, complexity and output."""

from queryforge.execution.complexity import (
    ComplexityAnalyzer,
    ComplexityConfiguration,
    ComplexityResult,
    DefaultComplexityAnalyzer,
    merge_complexity_configuration,
)
from queryforge.execution.document import (
    DefaultDocumentBuilder,
    DefaultDocumentCache,
    Document,
    DocumentBuilder,
    DocumentCache,
    MemoryDocumentCache,
    Selection,
)
from queryforge.execution.error_info import (
    DefaultErrorInfoProvider,
    ErrorInfo,
    ErrorInfoProvider,
    ErrorInfoProviderOptions,
)
from queryforge.execution.executer import DefaultDocumentExecuter, DocumentExecuter
from queryforge.execution.options import (
    ExecutionOptions,
    ExecutionOptionsConfigurator,
    ExecutionResult,
)
from queryforge.execution.validation import (
    CORE_RULES,
    DefaultDocumentValidator,
    DocumentValidator,
    ValidationResult,
    ValidationRule,
)
from queryforge.execution.writer import DocumentWriter, JsonDocumentWriter

__all__ = [
    "CORE_RULES",
    "ComplexityAnalyzer",
    "ComplexityConfiguration",
    "ComplexityResult",
    "DefaultComplexityAnalyzer",
    "DefaultDocumentBuilder",
    "DefaultDocumentCache",
    "DefaultDocumentExecuter",
    "DefaultDocumentValidator",
    "DefaultErrorInfoProvider",
    "Document",
    "DocumentBuilder",
    "DocumentCache",
    "DocumentExecuter",
    "DocumentValidator",
    "DocumentWriter",
    "ErrorInfo",
    "ErrorInfoProvider",
    "ErrorInfoProviderOptions",
    "ExecutionOptions",
    "ExecutionOptionsConfigurator",
    "ExecutionResult",
    "JsonDocumentWriter",
    "MemoryDocumentCache",
    "Selection",
    "ValidationResult",
    "ValidationRule",
    "merge_complexity_configuration",
]
