"""Complexity limits: configuration, ambient merge and analysis.

This module provides:
- ComplexityConfiguration: Per-execution limits, an option type of the builder
- merge_complexity_configuration: Reconciles an execution's limits with the
  ambient configuration registered in the request services
- ComplexityAnalyzer: Abstract analyzer, DefaultComplexityAnalyzer as default
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic import Field

from queryforge.configuration import BaseOptionsConfiguration
from queryforge.errors import ComplexityError, InvalidOperationError
from queryforge.execution.document import Document, Selection
from queryforge.execution.options import ExecutionOptions

logger = logging.getLogger(__name__)

DEFAULT_FIELD_IMPACT = 2.0

# Fields reconciled by merge_complexity_configuration, in merge order
COMPLEXITY_FIELDS = ("field_impact", "max_complexity", "max_depth", "max_recursion_count")


class ComplexityConfiguration(BaseOptionsConfiguration):
    """Limits applied to a single execution.

    Every field defaults to None, meaning "not set here". Unset fields inherit
    the ambient configuration during merge_complexity_configuration, and an
    unset limit is not enforced.

    Environment variables (read by from_properties):
        QUERYFORGE_COMPLEXITY_FIELD_IMPACT
        QUERYFORGE_COMPLEXITY_MAX_COMPLEXITY
        QUERYFORGE_COMPLEXITY_MAX_DEPTH
        QUERYFORGE_COMPLEXITY_MAX_RECURSION_COUNT

    Example:
        ```python
        config = ComplexityConfiguration(max_depth=10)
        config.max_complexity = 500
        ```

    """

    env_prefix: ClassVar[str] = "QUERYFORGE_COMPLEXITY_"

    field_impact: float | None = Field(
        default=None, gt=0, description="Multiplier applied per nesting level"
    )
    max_complexity: int | None = Field(
        default=None, ge=0, description="Highest accepted document complexity"
    )
    max_depth: int | None = Field(
        default=None, ge=0, description="Deepest accepted selection nesting"
    )
    max_recursion_count: int | None = Field(
        default=None, ge=0, description="Most selections the analyzer may visit"
    )

    def is_unset(self, name: str) -> bool:
        """Check whether a field still holds its default sentinel."""
        return getattr(self, name) == type(self).model_fields[name].default


def merge_complexity_configuration(options: ExecutionOptions) -> None:
    """Fill an execution's complexity limits from the ambient configuration.

    Explicitly set local fields win; unset local fields inherit the ambient
    value. The local object is mutated in place, never replaced, unless the
    execution had no configuration at all.

    Args:
        options: Options of the execution about to run

    Raises:
        InvalidOperationError: If the options carry no request services

    """
    if options.request_services is None:
        raise InvalidOperationError(
            "ExecutionOptions.request_services must be set to apply the ambient "
            "complexity configuration"
        )

    ambient = options.request_services.get_service(ComplexityConfiguration)
    if ambient is None:
        return

    local = options.complexity_configuration
    if local is None:
        options.complexity_configuration = ambient
        return

    for name in COMPLEXITY_FIELDS:
        if local.is_unset(name):
            setattr(local, name, getattr(ambient, name))
    logger.debug("Merged ambient complexity configuration into execution options")


@dataclass(frozen=True)
class ComplexityResult:
    """Measurements of one document.

    Attributes:
        depth: Deepest selection nesting (root fields are depth 1)
        complexity: Sum of ``field_impact ** (depth - 1)`` over all fields
        visited: Number of selections visited

    """

    depth: int
    complexity: float
    visited: int


class ComplexityAnalyzer(abc.ABC):
    """Measures documents and enforces complexity limits."""

    @abc.abstractmethod
    def analyze(
        self, document: Document, configuration: ComplexityConfiguration | None = None
    ) -> ComplexityResult:
        """Measure ``document``."""

    def validate(self, document: Document, configuration: ComplexityConfiguration) -> ComplexityResult:
        """Measure ``document`` and check it against ``configuration``.

        Raises:
            ComplexityError: If any configured limit is exceeded

        """
        result = self.analyze(document, configuration)
        if configuration.max_depth is not None and result.depth > configuration.max_depth:
            raise ComplexityError(
                f"Query is too nested to execute. Depth is {result.depth} levels, "
                f"maximum allowed on this endpoint is {configuration.max_depth}.",
                data={"depth": result.depth, "max_depth": configuration.max_depth},
            )
        if (
            configuration.max_complexity is not None
            and result.complexity > configuration.max_complexity
        ):
            raise ComplexityError(
                f"Query is too complex to execute. Complexity is {result.complexity:g}, "
                f"maximum allowed on this endpoint is {configuration.max_complexity}.",
                data={
                    "complexity": result.complexity,
                    "max_complexity": configuration.max_complexity,
                },
            )
        return result


class DefaultComplexityAnalyzer(ComplexityAnalyzer):
    """Walks the selection tree once, depth first."""

    def analyze(
        self, document: Document, configuration: ComplexityConfiguration | None = None
    ) -> ComplexityResult:
        """Measure ``document``.

        Raises:
            ComplexityError: If more selections than ``max_recursion_count``
                would have to be visited

        """
        impact = DEFAULT_FIELD_IMPACT
        limit = None
        if configuration is not None:
            if configuration.field_impact is not None:
                impact = configuration.field_impact
            limit = configuration.max_recursion_count

        depth = 0
        complexity = 0.0
        visited = 0
        stack: list[tuple[Selection, int]] = [(s, 1) for s in document.selections]
        while stack:
            selection, level = stack.pop()
            visited += 1
            if limit is not None and visited > limit:
                raise ComplexityError(
                    f"Query is too large to analyze. More than {limit} selections "
                    "would have to be visited.",
                    data={"max_recursion_count": limit},
                )
            depth = max(depth, level)
            complexity += impact ** (level - 1)
            stack.extend((child, level + 1) for child in selection.selections)

        return ComplexityResult(depth, complexity, visited)
