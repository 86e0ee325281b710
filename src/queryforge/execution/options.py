"""Per-request execution options and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from queryforge.errors import ExecutionFailure

if TYPE_CHECKING:
    from queryforge.di.protocols import ServiceResolver
    from queryforge.execution.complexity import ComplexityConfiguration
    from queryforge.execution.document import Document


@dataclass
class ExecutionOptions:
    """Everything one execution needs, assembled by the caller.

    Attributes:
        query: Query document text
        operation_name: Operation to run when the document names one
        variables: Variable values supplied with the request
        root_value: Object the root selection set is resolved against
        request_services: Request-scoped resolver, the source of ambient services
        complexity_configuration: Limits for this execution; None until set
        user_context: Free-form values shared with resolvers

    """

    query: str | None = None
    operation_name: str | None = None
    variables: dict[str, Any] = field(default_factory=dict)
    root_value: Any = None
    request_services: ServiceResolver | None = None
    complexity_configuration: ComplexityConfiguration | None = None
    user_context: dict[str, Any] = field(default_factory=dict)


class ExecutionOptionsConfigurator(Protocol):
    """Protocol for contributors that adjust options before execution starts.

    Every configurator registered under this key is run by the executer, in
    registration order, before the document is parsed.
    """

    def __call__(self, options: ExecutionOptions) -> None:
        """Mutate ``options`` in place."""
        ...


@dataclass
class ExecutionResult:
    """Outcome of one execution.

    Attributes:
        data: Resolved selection tree, None when execution did not run
        errors: Failures reported to the caller
        document: Parsed document, when parsing succeeded
        executed: Whether field resolution ran

    """

    data: dict[str, Any] | None = None
    errors: list[ExecutionFailure] = field(default_factory=list)
    document: Document | None = None
    executed: bool = False

    @property
    def succeeded(self) -> bool:
        """True when the execution ran and reported no errors."""
        return self.executed and not self.errors
