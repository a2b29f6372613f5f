"""Filter resolution and invocation runtime.

This package holds the filter registry used by compiled templates and by the
rendering pipeline, together with the content-type context handed to
content-aware filters.
"""

from vellum.runtime.filter_info import FilterInfo, content_aware
from vellum.runtime.registry import FilterEntry, FilterRegistry, is_content_aware_callable
from vellum.runtime.resolution import NOT_HANDLED, Handled

__all__ = [
    "FilterEntry",
    "FilterInfo",
    "FilterRegistry",
    "Handled",
    "NOT_HANDLED",
    "content_aware",
    "is_content_aware_callable",
]
