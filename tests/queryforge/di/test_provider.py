"""Tests for ServiceProvider - the reference container.

These tests verify the provider's ability to:
- Resolve services with singleton, scoped and transient lifetimes
- Apply last-wins for single resolution and ledger order for enumeration
- Construct implementation types by constructor injection
- Hand the resolving scope to factories
"""

from collections.abc import Iterable

import pytest

from queryforge.di import (
    ServiceCollection,
    ServiceDescriptor,
    ServiceLifetime,
    ServiceProvider,
    ServiceResolver,
    ServiceScope,
)
from queryforge.errors import InvalidOperationError


class Clock:
    """Service without dependencies."""

    pass


class Plugin:
    """Service key registered several times."""

    pass


class FirstPlugin(Plugin):
    pass


class SecondPlugin(Plugin):
    pass


class Scheduler:
    """Service depending on a Clock and on every Plugin."""

    def __init__(self, clock: Clock, plugins: Iterable[Plugin], label: str = "default") -> None:
        self.clock = clock
        self.plugins = list(plugins)
        self.label = label


class OptionalClockUser:
    """Service with an optional dependency."""

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock


class NeedsMissing:
    """Service with a dependency nobody registers."""

    def __init__(self, clock: Clock) -> None:
        self.clock = clock


def build(*descriptors: ServiceDescriptor) -> ServiceProvider:
    services = ServiceCollection()
    for descriptor in descriptors:
        services.add(descriptor)
    return services.build_service_provider()


# =============================================================================
# Lifetimes
# =============================================================================


class TestServiceProviderLifetimes:
    """Test suite for lifetime handling."""

    def test_singleton_returns_same_instance(self):
        """Verify a singleton is created once per provider."""
        # Arrange
        provider = build(ServiceDescriptor.for_type(Clock, Clock, ServiceLifetime.SINGLETON))

        # Act
        first = provider.get_service(Clock)
        second = provider.create_scope().get_service(Clock)

        # Assert
        assert first is second, "Singleton should be shared across scopes"

    def test_singleton_is_recreated_by_a_new_provider(self):
        """Verify providers do not share singletons."""
        # Arrange
        services = ServiceCollection()
        services.add(ServiceDescriptor.for_type(Clock, Clock))

        # Act
        first = services.build_service_provider().get_service(Clock)
        second = services.build_service_provider().get_service(Clock)

        # Assert
        assert first is not second

    def test_scoped_instances_are_shared_within_a_scope_only(self):
        """Verify scoped services are cached per scope."""
        # Arrange
        provider = build(ServiceDescriptor.for_type(Clock, Clock, ServiceLifetime.SCOPED))
        scope_a = provider.create_scope()
        scope_b = provider.create_scope()

        # Act & Assert
        assert scope_a.get_service(Clock) is scope_a.get_service(Clock)
        assert scope_a.get_service(Clock) is not scope_b.get_service(Clock)

    def test_transient_returns_new_instance_each_time(self):
        """Verify a transient is created on every resolution."""
        # Arrange
        provider = build(ServiceDescriptor.for_type(Clock, Clock, ServiceLifetime.TRANSIENT))

        # Act & Assert
        assert provider.get_service(Clock) is not provider.get_service(Clock)

    def test_instance_is_returned_as_registered(self):
        """Verify pre-built instances are returned unchanged."""
        # Arrange
        clock = Clock()
        provider = build(ServiceDescriptor.for_instance(Clock, clock))

        # Act & Assert
        assert provider.get_service(Clock) is clock

    def test_factory_receives_the_resolving_scope(self):
        """Verify factories are called with a resolver for further lookups."""
        # Arrange
        received = []

        def factory(services):
            received.append(services)
            return Clock()

        provider = build(ServiceDescriptor.for_factory(Clock, factory, ServiceLifetime.SCOPED))
        scope = provider.create_scope()

        # Act
        scope.get_service(Clock)

        # Assert
        assert received == [scope]


# =============================================================================
# Resolution rules
# =============================================================================


class TestServiceProviderResolution:
    """Test suite for key lookup and constructor injection."""

    def test_unregistered_service_returns_none(self):
        """Verify get_service reports a missing key with None."""
        assert build().get_service(Clock) is None

    def test_required_service_raises_when_missing(self):
        """Verify get_required_service raises InvalidOperationError."""
        with pytest.raises(InvalidOperationError, match="No service registered for type Clock"):
            build().get_required_service(Clock)

    def test_last_registration_wins(self):
        """Verify single resolution uses the most recent descriptor."""
        # Arrange
        provider = build(
            ServiceDescriptor.for_type(Plugin, FirstPlugin),
            ServiceDescriptor.for_type(Plugin, SecondPlugin),
        )

        # Act & Assert
        assert isinstance(provider.get_service(Plugin), SecondPlugin)

    def test_get_services_returns_every_registration_in_order(self):
        """Verify enumeration follows ledger order."""
        # Arrange
        provider = build(
            ServiceDescriptor.for_type(Plugin, FirstPlugin),
            ServiceDescriptor.for_type(Plugin, SecondPlugin),
        )

        # Act
        plugins = provider.get_services(Plugin)

        # Assert
        assert [type(p) for p in plugins] == [FirstPlugin, SecondPlugin]
        assert provider.get_services(Clock) == []

    def test_constructor_injection_resolves_dependencies(self):
        """Verify parameters are resolved from their type hints."""
        # Arrange
        provider = build(
            ServiceDescriptor.for_type(Clock, Clock),
            ServiceDescriptor.for_type(Plugin, FirstPlugin),
            ServiceDescriptor.for_type(Plugin, SecondPlugin),
            ServiceDescriptor.for_type(Scheduler, Scheduler),
        )

        # Act
        scheduler = provider.get_required_service(Scheduler)

        # Assert
        assert scheduler.clock is provider.get_service(Clock)
        assert [type(p) for p in scheduler.plugins] == [FirstPlugin, SecondPlugin]
        assert scheduler.label == "default", "Unresolvable parameters keep their default"

    def test_optional_dependency_is_left_to_its_default(self):
        """Verify an unregistered optional dependency falls back to the default."""
        # Arrange
        provider = build(ServiceDescriptor.for_type(OptionalClockUser, OptionalClockUser))

        # Act
        user = provider.get_required_service(OptionalClockUser)

        # Assert
        assert user.clock is None

    def test_optional_dependency_is_injected_when_registered(self):
        """Verify Optional hints resolve the wrapped type."""
        # Arrange
        provider = build(
            ServiceDescriptor.for_type(Clock, Clock),
            ServiceDescriptor.for_type(OptionalClockUser, OptionalClockUser),
        )

        # Act & Assert
        assert isinstance(provider.get_required_service(OptionalClockUser).clock, Clock)

    def test_missing_required_dependency_raises(self):
        """Verify a required parameter that cannot be resolved is reported."""
        # Arrange
        provider = build(ServiceDescriptor.for_type(NeedsMissing, NeedsMissing))

        # Act & Assert
        with pytest.raises(InvalidOperationError, match="parameter 'clock' of NeedsMissing"):
            provider.get_service(NeedsMissing)

    def test_scope_resolves_itself_as_service_resolver(self):
        """Verify the scope answers for ServiceResolver when nothing else is registered."""
        # Arrange
        provider = build()
        scope = provider.create_scope()

        # Act & Assert
        assert scope.get_service(ServiceResolver) is scope
        assert scope.get_service(ServiceScope) is scope
        assert scope.service_provider is provider
