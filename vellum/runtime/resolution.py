"""Outcome protocol for dynamic filter resolvers.

A dynamic resolver is called as ``resolver(name, *args, **kwargs)`` and answers
with one of two cases:

- ``Handled(value)``: the resolver claims the call and ``value`` is the result.
- ``NOT_HANDLED``: the resolver defers to the next one in the chain.

For plain callables, ``None`` also means "not handled" and any other bare value
is taken as handled. A resolver that really wants to produce ``None`` must
return ``Handled(None)``.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Handled:
    """A dynamic resolver's claimed result."""

    value: Any


class _NotHandled:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_HANDLED"

    def __bool__(self) -> bool:
        return False


NOT_HANDLED = _NotHandled()


def unpack_outcome(outcome: Any) -> tuple[bool, Any]:
    """Normalize a resolver's answer into ``(handled, value)``.

    Example:
        >>> unpack_outcome(Handled(None))
        (True, None)
        >>> unpack_outcome(NOT_HANDLED)
        (False, None)
    """
    if isinstance(outcome, Handled):
        return (True, outcome.value)
    if outcome is None or outcome is NOT_HANDLED:
        return (False, None)
    return (True, outcome)
