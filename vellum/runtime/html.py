"""Helpers for values that carry the ``__html__`` markup protocol."""

from typing import Any

from markupsafe import Markup


def is_markup(value: Any) -> bool:
    """Check whether a value declares itself as safe markup."""
    return callable(getattr(value, "__html__", None))


def to_raw(value: Any) -> str:
    """Return the plain ``str`` form of a markup value."""
    return str(value.__html__())


def mark_safe(value: Any) -> Markup:
    """Flag a raw value as markup-safe."""
    return Markup(value)
