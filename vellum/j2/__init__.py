"""Vellum Jinja2 integration package.

Wires a FilterRegistry into a Jinja2 environment so that compiled templates
resolve their filters through the registry.
"""

from vellum.j2.core import RegistryFilters, TemplateRenderer
from vellum.j2.exceptions import TemplateError, TemplateValidationError

__all__ = [
    "RegistryFilters",
    "TemplateError",
    "TemplateRenderer",
    "TemplateValidationError",
]
