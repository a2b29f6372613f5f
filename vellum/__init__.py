"""Vellum: filter resolution and invocation for template rendering.

Typical use:

    from vellum import FilterRegistry, FilterInfo

    registry = FilterRegistry()
    registry.register("upper", str.upper)
    registry["upper"]("abc")  # "ABC"
"""

from vellum.builder import RegistryBuilder
from vellum.constants import ContentType
from vellum.exceptions import (
    ContentTypeMismatchWarning,
    FilterShouldBeContentAwareWarning,
    UndefinedFilterError,
    VellumError,
    VellumWarning,
)
from vellum.runtime import NOT_HANDLED, FilterInfo, FilterRegistry, Handled, content_aware
from vellum.settings import VellumSettings

__all__ = [
    "ContentType",
    "ContentTypeMismatchWarning",
    "FilterInfo",
    "FilterRegistry",
    "FilterShouldBeContentAwareWarning",
    "Handled",
    "NOT_HANDLED",
    "RegistryBuilder",
    "UndefinedFilterError",
    "VellumError",
    "VellumSettings",
    "VellumWarning",
    "content_aware",
]
