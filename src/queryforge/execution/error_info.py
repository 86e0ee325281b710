"""Shaping of execution errors for the response."""

from __future__ import annotations

import abc
import re
from typing import Any

from pydantic import BaseModel, Field

from queryforge.configuration import BaseOptionsConfiguration
from queryforge.errors import ExecutionFailure


class ErrorInfoProviderOptions(BaseOptionsConfiguration):
    """Controls which details of an error reach the caller.

    Attributes:
        expose_exceptions: Include the exception type and message chain
        expose_code: Include the error's code
        expose_codes: Include codes derived from the exception hierarchy
        expose_data: Include the error's structured data

    """

    expose_exceptions: bool = False
    expose_code: bool = True
    expose_codes: bool = True
    expose_data: bool = True


class ErrorInfo(BaseModel):
    """Serialisable description of one error."""

    message: str
    extensions: dict[str, Any] = Field(default_factory=dict)


class ErrorInfoProvider(abc.ABC):
    """Converts execution failures into ErrorInfo."""

    @abc.abstractmethod
    def get_info(self, error: ExecutionFailure) -> ErrorInfo:
        """Describe ``error`` for the response."""


class DefaultErrorInfoProvider(ErrorInfoProvider):
    """Builds ``extensions`` according to ErrorInfoProviderOptions."""

    def __init__(self, options: ErrorInfoProviderOptions | None = None) -> None:
        """Initialise the provider.

        Args:
            options: Exposure settings; all defaults when None

        """
        self._options = options or ErrorInfoProviderOptions()

    def get_info(self, error: ExecutionFailure) -> ErrorInfo:
        extensions: dict[str, Any] = {}
        if self._options.expose_code:
            extensions["code"] = error.code
        if self._options.expose_codes:
            extensions["codes"] = _codes_of(error)
        if self._options.expose_data and error.data:
            extensions["data"] = dict(error.data)
        if self._options.expose_exceptions:
            extensions["details"] = _details_of(error)
        return ErrorInfo(message=str(error), extensions=extensions)


def _codes_of(error: BaseException) -> list[str]:
    """Error codes of ``error`` and every exception it was raised from."""
    codes: list[str] = []
    current: BaseException | None = error
    while current is not None:
        code = getattr(current, "code", None)
        if not isinstance(code, str):
            code = _to_code(type(current).__name__)
        codes.append(code)
        current = current.__cause__
    return codes


def _to_code(name: str) -> str:
    if name.endswith(("Error", "Exception")):
        name = re.sub(r"(Error|Exception)$", "", name)
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", name).upper()


def _details_of(error: BaseException) -> str:
    parts: list[str] = []
    current: BaseException | None = error
    while current is not None:
        parts.append(f"{type(current).__name__}: {current}")
        current = current.__cause__
    return " ---> ".join(parts)
