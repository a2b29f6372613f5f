"""Shared fixtures for Vellum unit tests."""

import pytest

from tests.unit.sample_filters import upper_filter, wrap_filter
from vellum import FilterRegistry, Handled, NOT_HANDLED


@pytest.fixture
def registry():
    """Provide an empty FilterRegistry."""
    return FilterRegistry("test_filters")


@pytest.fixture
def populated_registry(registry):
    """Provide a registry with one classic and one content-aware filter."""
    registry.register("upper", upper_filter)
    registry.register("wrap", wrap_filter)
    return registry


@pytest.fixture
def recording_resolver():
    """Build dynamic resolvers that record the names they are asked for.

    Usage: ``resolver = recording_resolver(calls, "A", handles={"shout": "..."})``
    """

    def factory(calls: list, label: str, handles: dict | None = None):
        handles = handles or {}

        def resolver(name, *args, **kwargs):
            calls.append((label, name, args))
            if name in handles:
                return Handled(handles[name])
            return NOT_HANDLED

        return resolver

    return factory
