"""Content-type context handed to content-aware filters."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from vellum.constants import CONTENT_AWARE_MARKER, ContentType

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class FilterInfo:
    """Mutable description of the value currently being filtered.

    A content-aware filter receives the FilterInfo as its first argument. It may
    read ``content_type`` to branch, and overwrite it to declare that its output
    has a different content type (e.g. an escaping filter sets it to HTML).
    """

    content_type: ContentType | str | None = ContentType.TEXT


def content_aware(func: F) -> F:
    """Mark a callable as content-aware.

    The callable will receive a FilterInfo as its first positional argument.
    The tag takes precedence over signature inspection, so the first parameter
    does not need a ``FilterInfo`` annotation.

    Example:
        >>> @content_aware
        ... def strip_html(info, value):
        ...     info.content_type = ContentType.TEXT
        ...     return value
    """
    setattr(func, CONTENT_AWARE_MARKER, True)
    return func
