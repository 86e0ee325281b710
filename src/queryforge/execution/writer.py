"""Serialisation of execution results."""

from __future__ import annotations

import abc
import json
from typing import Any

from queryforge.errors import ExecutionFailure
from queryforge.execution.error_info import DefaultErrorInfoProvider, ErrorInfoProvider
from queryforge.execution.options import ExecutionResult


class DocumentWriter(abc.ABC):
    """Writes an ExecutionResult in a wire format."""

    @abc.abstractmethod
    def write(self, result: ExecutionResult) -> str:
        """Serialise ``result``."""


class JsonDocumentWriter(DocumentWriter):
    """Writes results as ``{"data": ..., "errors": [...]}`` JSON."""

    def __init__(
        self, error_info_provider: ErrorInfoProvider | None = None, *, indent: int | None = None
    ) -> None:
        """Initialise the writer.

        Args:
            error_info_provider: Shapes each error; the default provider when None
            indent: JSON indentation, compact output when None

        """
        self._error_info_provider = error_info_provider or DefaultErrorInfoProvider()
        self._indent = indent

    def write(self, result: ExecutionResult) -> str:
        payload: dict[str, Any] = {}
        if result.errors:
            payload["errors"] = [self._error_payload(error) for error in result.errors]
        if result.executed:
            payload["data"] = result.data
        return json.dumps(payload, indent=self._indent, default=str)

    def _error_payload(self, error: ExecutionFailure) -> dict[str, Any]:
        info = self._error_info_provider.get_info(error)
        # Empty extensions are omitted from the response
        return info.model_dump(exclude=None if info.extensions else {"extensions"})
