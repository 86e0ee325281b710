"""Options layer: per-type chains of default and explicit contributors."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from queryforge.di.descriptor import ServiceDescriptor
from queryforge.di.lifetime import ServiceLifetime
from queryforge.di.protocols import ServiceRegistry, ServiceResolver
from queryforge.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

type OptionsAction[T] = Callable[[T, ServiceResolver], None]


class OptionsChain[T]:
    """Ordered contributors that produce one configured instance of ``T``.

    Default contributors run first, in insertion order, then explicit
    contributors in insertion order. Each contributor mutates the instance in
    place and may look up already-registered services through the resolver.

    The chain is consulted when ``build`` runs, not when contributors are
    added, so contributors added after the chain was registered with a
    container are still applied.
    """

    def __init__(self, options_type: type[T]) -> None:
        """Initialise an empty chain for ``options_type``."""
        self.options_type = options_type
        self._defaults: list[OptionsAction[T]] = []
        self._explicit: list[OptionsAction[T]] = []

    @property
    def defaults(self) -> tuple[OptionsAction[T], ...]:
        """Default contributors in the order they run."""
        return tuple(self._defaults)

    @property
    def explicit(self) -> tuple[OptionsAction[T], ...]:
        """Explicit contributors in the order they run."""
        return tuple(self._explicit)

    def add_default(self, action: OptionsAction[T] | None) -> None:
        """Append a default contributor; None only marks the chain as used."""
        if check_action(action) is not None:
            self._defaults.append(action)

    def add_explicit(self, action: OptionsAction[T] | None) -> None:
        """Append an explicit contributor; None only marks the chain as used."""
        if check_action(action) is not None:
            self._explicit.append(action)

    def build(self, services: ServiceResolver) -> T:
        """Create a default instance of ``T`` and run every contributor on it.

        Args:
            services: Resolver handed to each contributor

        Returns:
            The fully configured instance

        """
        options: Any = self.options_type()
        for action in self._defaults:
            action(options, services)
        for action in self._explicit:
            action(options, services)
        logger.debug(
            "Configured %s with %d default and %d explicit contributors",
            self.options_type.__name__,
            len(self._defaults),
            len(self._explicit),
        )
        return options


def check_action[T](action: OptionsAction[T] | None) -> OptionsAction[T] | None:
    """Reject contributors that cannot be called; None passes through."""
    if action is not None and not callable(action):
        raise InvalidArgumentError(f"Options contributor must be callable, got {action!r}")
    return action


@dataclass(frozen=True)
class OptionsChainKey:
    """Ledger key holding the contributor chain of one option type.

    The chain is recorded in the ledger itself, as an instance descriptor, so
    every builder and every direct caller writing to the same ledger extends
    the same chain.
    """

    options_type: type


def find_options_chain[T](
    services: ServiceRegistry, options_type: type[T]
) -> OptionsChain[T] | None:
    """Get the chain of ``options_type`` recorded in ``services``, if any."""
    key = OptionsChainKey(options_type)
    for descriptor in services:
        if descriptor.service_type == key:
            return descriptor.implementation_instance
    return None


def ensure_options_chain[T](services: ServiceRegistry, options_type: type[T]) -> OptionsChain[T]:
    """Get the chain of ``options_type`` from ``services``, recording it on first use.

    On first use the chain is added to the ledger, and ``options_type`` is
    registered as a singleton built by the chain unless something already
    targets it.

    Raises:
        InvalidArgumentError: If options_type is None or not a class

    """
    if options_type is None:
        raise InvalidArgumentError("options_type is required")
    if not inspect.isclass(options_type):
        raise InvalidArgumentError(f"options_type must be a class, got {options_type!r}")

    chain = find_options_chain(services, options_type)
    if chain is not None:
        return chain

    chain = OptionsChain(options_type)
    services.add(ServiceDescriptor.for_instance(OptionsChainKey(options_type), chain))
    if any(d.service_type == options_type for d in services):
        logger.debug(
            "Kept existing registration for %s, its chain is not resolved",
            options_type.__name__,
        )
    else:
        services.add(
            ServiceDescriptor.for_factory(options_type, chain.build, ServiceLifetime.SINGLETON)
        )
    return chain


def configure_options[T](
    services: ServiceRegistry, options_type: type[T], action: OptionsAction[T] | None = None
) -> OptionsChain[T]:
    """Append an explicit contributor for ``options_type`` to the chain in ``services``."""
    check_action(action)
    chain = ensure_options_chain(services, options_type)
    chain.add_explicit(action)
    return chain


def configure_option_defaults[T](
    services: ServiceRegistry, options_type: type[T], action: OptionsAction[T] | None = None
) -> OptionsChain[T]:
    """Append a default contributor for ``options_type`` to the chain in ``services``."""
    check_action(action)
    chain = ensure_options_chain(services, options_type)
    chain.add_default(action)
    return chain
