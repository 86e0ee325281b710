"""Query documents: parsing and caching.

This module provides:
- Document, Selection: Parsed form of a query's selection tree
- DocumentBuilder: Abstract base for parsers, DefaultDocumentBuilder as default
- DocumentCache: Abstract base for caches of parsed documents, with the no-op
  DefaultDocumentCache and the thread-safe MemoryDocumentCache

The default builder parses with graphql-core and keeps the subset the
executer runs: a single operation with fields, aliases, arguments and nested
selection sets. Fragments and directives are rejected.
"""

from __future__ import annotations

import abc
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import ClassVar

from graphql import (
    FieldNode,
    FragmentDefinitionNode,
    GraphQLSyntaxError,
    Node,
    OperationDefinitionNode,
    SelectionSetNode,
    parse,
    print_ast,
)

from queryforge.errors import DocumentParseError, InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """One field in a selection set.

    Attributes:
        name: Field name
        alias: Response key chosen by the caller, if any
        arguments: Argument list as query text, if any
        selections: Nested selection set; empty for leaf fields

    """

    name: str
    alias: str | None = None
    arguments: str | None = None
    selections: tuple[Selection, ...] = ()

    @property
    def response_name(self) -> str:
        """Key the field's value is reported under."""
        return self.alias or self.name


@dataclass(frozen=True)
class Document:
    """A parsed query document holding a single operation.

    Attributes:
        source: Query text the document was parsed from
        operation_type: ``query``, ``mutation`` or ``subscription``
        operation_name: Name of the operation, None when anonymous
        selections: Root selection set
        definition: graphql-core AST of the operation

    """

    source: str
    operation_type: str
    operation_name: str | None
    selections: tuple[Selection, ...]
    definition: OperationDefinitionNode | None = field(default=None, compare=False, repr=False)


class DocumentBuilder(abc.ABC):
    """Turns query text into a Document."""

    @abc.abstractmethod
    def build(self, query: str) -> Document:
        """Parse ``query``.

        Raises:
            DocumentParseError: If the query is empty or malformed

        """


class DefaultDocumentBuilder(DocumentBuilder):
    """Parser backed by graphql-core."""

    def build(self, query: str) -> Document:
        """Parse ``query`` into a Document."""
        if not query or not query.strip():
            raise DocumentParseError("Document does not contain any operation")
        try:
            document_node = parse(query)
        except GraphQLSyntaxError as e:
            data: dict[str, object] = {}
            if e.positions:
                data["position"] = e.positions[0]
            if e.locations:
                data["line"] = e.locations[0].line
                data["column"] = e.locations[0].column
            raise DocumentParseError(e.message, data=data) from e

        if len(document_node.definitions) != 1:
            extra = document_node.definitions[1]
            raise DocumentParseError(
                f"Found {len(document_node.definitions)} definitions; "
                "only a single operation is supported",
                data=_position(extra),
            )
        (definition,) = document_node.definitions
        if isinstance(definition, FragmentDefinitionNode):
            raise DocumentParseError("Fragments are not supported", data=_position(definition))
        if not isinstance(definition, OperationDefinitionNode):
            raise DocumentParseError(
                f"Unsupported definition {definition.kind}", data=_position(definition)
            )
        _reject_directives(definition)

        return Document(
            source=query,
            operation_type=definition.operation.value,
            operation_name=definition.name.value if definition.name else None,
            selections=_selections(definition.selection_set),
            definition=definition,
        )


def _selections(selection_set: SelectionSetNode) -> tuple[Selection, ...]:
    selections: list[Selection] = []
    for node in selection_set.selections:
        if not isinstance(node, FieldNode):
            raise DocumentParseError("Fragments are not supported", data=_position(node))
        _reject_directives(node)
        arguments = ", ".join(print_ast(argument) for argument in node.arguments or ())
        selections.append(
            Selection(
                name=node.name.value,
                alias=node.alias.value if node.alias else None,
                arguments=arguments or None,
                selections=_selections(node.selection_set) if node.selection_set else (),
            )
        )
    return tuple(selections)


def _reject_directives(node: FieldNode | OperationDefinitionNode) -> None:
    if node.directives:
        raise DocumentParseError(
            "Directives are not supported",
            data=_position(node.directives[0]),
        )


def _position(node: Node) -> dict[str, object]:
    return {"position": node.loc.start} if node.loc else {}

class DocumentCache(abc.ABC):
    """Cache of parsed documents keyed by query text.

    Implementations are shared across concurrent executions and must be
    thread-safe.
    """

    @abc.abstractmethod
    def get(self, query: str) -> Document | None:
        """Return the cached document for ``query``, or None."""

    @abc.abstractmethod
    def set(self, query: str, document: Document) -> None:
        """Store ``document`` for ``query``."""


class DefaultDocumentCache(DocumentCache):
    """Cache that stores nothing; every lookup misses."""

    INSTANCE: ClassVar[DefaultDocumentCache]

    def get(self, query: str) -> Document | None:
        return None

    def set(self, query: str, document: Document) -> None:
        pass


DefaultDocumentCache.INSTANCE = DefaultDocumentCache()


class MemoryDocumentCache(DocumentCache):
    """Least-recently-used in-memory cache guarded by a lock."""

    def __init__(self, max_entries: int = 100) -> None:
        """Initialise the cache.

        Args:
            max_entries: Number of documents kept before the oldest is evicted

        Raises:
            InvalidArgumentError: If max_entries is lower than 1

        """
        if max_entries < 1:
            raise InvalidArgumentError(f"max_entries must be at least 1, got {max_entries}")
        self._max_entries = max_entries
        self._entries: OrderedDict[str, Document] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, query: str) -> Document | None:
        with self._lock:
            document = self._entries.get(query)
            if document is not None:
                self._entries.move_to_end(query)
            return document

    def set(self, query: str, document: Document) -> None:
        with self._lock:
            self._entries[query] = document
            self._entries.move_to_end(query)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cached document (%d chars)", len(evicted))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
