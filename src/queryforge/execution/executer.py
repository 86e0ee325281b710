"""Document execution pipeline."""

from __future__ import annotations

import abc
import inspect
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from queryforge.errors import ExecutionFailure, InvalidArgumentError
from queryforge.execution.complexity import ComplexityAnalyzer
from queryforge.execution.document import Document, DocumentBuilder, DocumentCache, Selection
from queryforge.execution.options import (
    ExecutionOptions,
    ExecutionOptionsConfigurator,
    ExecutionResult,
)
from queryforge.execution.validation import DocumentValidator

logger = logging.getLogger(__name__)


class DocumentExecuter(abc.ABC):
    """Runs one query document from text to result."""

    @abc.abstractmethod
    def execute(self, options: ExecutionOptions) -> ExecutionResult:
        """Execute the request described by ``options``."""


class DefaultDocumentExecuter(DocumentExecuter):
    """Executer that wires the default pipeline stages together.

    Stages, in order:
    1. run every ExecutionOptionsConfigurator on the options
    2. get the document from the cache, or parse and cache it
    3. validate the document
    4. enforce the complexity configuration, when one is set
    5. resolve the selection tree against ``options.root_value``

    Failures of stages 2-4 are reported in ``ExecutionResult.errors``;
    configurator errors are contract violations and propagate.
    """

    def __init__(
        self,
        document_builder: DocumentBuilder,
        document_validator: DocumentValidator,
        complexity_analyzer: ComplexityAnalyzer,
        document_cache: DocumentCache | None = None,
        configurators: Iterable[ExecutionOptionsConfigurator] = (),
    ) -> None:
        """Initialise the executer with its pipeline stages."""
        self._document_builder = document_builder
        self._document_validator = document_validator
        self._complexity_analyzer = complexity_analyzer
        self._document_cache = document_cache
        self._configurators = tuple(configurators)

    def execute(self, options: ExecutionOptions) -> ExecutionResult:
        """Execute the request described by ``options``.

        Raises:
            InvalidArgumentError: If options is None
            InvalidOperationError: If a configurator finds the options unusable

        """
        if options is None:
            raise InvalidArgumentError("options is required")

        for configurator in self._configurators:
            configurator(options)

        result = ExecutionResult()
        try:
            document = self._get_document(options.query or "")
            result.document = document

            validation = self._document_validator.validate(document)
            if not validation.is_valid:
                result.errors.extend(validation.errors)
                return result

            if options.complexity_configuration is not None:
                self._complexity_analyzer.validate(document, options.complexity_configuration)
        except ExecutionFailure as e:
            logger.debug("Execution stopped before resolution: %s", e)
            result.errors.append(e)
            return result

        result.data = _resolve_selections(document.selections, options.root_value)
        result.executed = True
        return result

    def _get_document(self, query: str) -> Document:
        if self._document_cache is not None:
            document = self._document_cache.get(query)
            if document is not None:
                return document
        document = self._document_builder.build(query)
        if self._document_cache is not None:
            self._document_cache.set(query, document)
        return document


def _resolve_selections(selections: tuple[Selection, ...], source: Any) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for selection in selections:
        value = _field_value(source, selection.name)
        if selection.selections and value is not None:
            if isinstance(value, (list, tuple)):
                value = [_resolve_selections(selection.selections, item) for item in value]
            else:
                value = _resolve_selections(selection.selections, value)
        data[selection.response_name] = value
    return data


def _field_value(source: Any, name: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        value = source.get(name)
    else:
        value = getattr(source, name, None)
    if inspect.ismethod(value) or inspect.isfunction(value):
        value = value()
    return value
