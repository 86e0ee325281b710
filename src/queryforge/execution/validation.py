"""Document validation against a set of rules."""

from __future__ import annotations

import abc
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from queryforge.errors import DocumentValidationError
from queryforge.execution.document import Document, Selection

logger = logging.getLogger(__name__)

type ValidationRule = Callable[[Document], list[DocumentValidationError]]


@dataclass
class ValidationResult:
    """Errors collected while validating one document."""

    errors: list[DocumentValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True when no rule reported an error."""
        return not self.errors


def unique_response_names(document: Document) -> list[DocumentValidationError]:
    """Report selection sets that use the same response key twice."""
    errors: list[DocumentValidationError] = []

    def visit(selections: tuple[Selection, ...], path: str) -> None:
        seen: set[str] = set()
        for selection in selections:
            key = selection.response_name
            if key in seen:
                errors.append(
                    DocumentValidationError(
                        f"Response name '{key}' is selected more than once in {path}",
                        data={"response_name": key, "path": path},
                    )
                )
            seen.add(key)
            if selection.selections:
                visit(selection.selections, f"{path}.{key}")

    visit(document.selections, document.operation_type)
    return errors


def supported_operation(document: Document) -> list[DocumentValidationError]:
    """Report operations other than queries, which the executer cannot run."""
    if document.operation_type == "query":
        return []
    return [
        DocumentValidationError(
            f"Operation type '{document.operation_type}' is not supported",
            data={"operation_type": document.operation_type},
        )
    ]


CORE_RULES: tuple[ValidationRule, ...] = (supported_operation, unique_response_names)


class DocumentValidator(abc.ABC):
    """Checks parsed documents before they are executed."""

    @abc.abstractmethod
    def validate(
        self, document: Document, rules: Iterable[ValidationRule] | None = None
    ) -> ValidationResult:
        """Validate ``document`` with ``rules`` (the core rules when None)."""


class DefaultDocumentValidator(DocumentValidator):
    """Runs every rule and collects all reported errors."""

    def validate(
        self, document: Document, rules: Iterable[ValidationRule] | None = None
    ) -> ValidationResult:
        result = ValidationResult()
        for rule in CORE_RULES if rules is None else rules:
            result.errors.extend(rule(document))
        if result.errors:
            logger.debug("Document failed validation with %d errors", len(result.errors))
        return result
