"""Shared fixtures for j2 unit tests."""

import pytest

from vellum import VellumSettings
from vellum.j2 import TemplateRenderer


@pytest.fixture
def renderer(populated_registry):
    """Provide a renderer over the populated registry with default settings."""
    return TemplateRenderer(populated_registry)


@pytest.fixture
def lenient_renderer(populated_registry):
    """Provide a renderer that neither autoescapes nor fails on undefined variables."""
    settings = VellumSettings(local_filters=[], autoescape=False, strict_undefined=False)
    return TemplateRenderer(populated_registry, settings)
