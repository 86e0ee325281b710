"""Shared fixtures for queryforge tests."""

import pytest

from queryforge.di import ServiceCollection, ServiceCollectionBuilder


@pytest.fixture
def services() -> ServiceCollection:
    """Provide an empty service ledger."""
    return ServiceCollection()


@pytest.fixture
def builder(services: ServiceCollection) -> ServiceCollectionBuilder:
    """Provide a builder over ``services`` with the default services registered."""
    return ServiceCollectionBuilder(services)
