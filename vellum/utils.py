import importlib
import importlib.util
import inspect
from collections.abc import Callable, Iterable
from pathlib import Path
from types import ModuleType
from typing import Any

from vellum.constants import (
    CALLBACK_METHOD_SEPARATOR,
    CALLBACK_MODULE_SEPARATOR,
    SUGGESTION_DELETE_COST,
    SUGGESTION_INSERT_COST,
    SUGGESTION_REPLACE_COST,
)
from vellum.exceptions import CoreError, InvalidFilterCallbackError


def import_module_from_path(module_name: str, module_path: str | Path) -> ModuleType:
    """
    Import a module from a given file path.

    Args:
        module_name: Name to assign to the module.
        module_path: Path to the module file.

    Returns:
        Imported module.

    Raises:
        CoreError: If there is an error importing the module.
    """
    try:
        spec = importlib.util.spec_from_file_location(module_name, str(module_path))
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    except Exception as e:
        raise CoreError(
            f"Failed to import module '{module_name}' from '{module_path}': {e!s}",
            component="ModuleLoader",
        ) from e


def is_public_callable(attr: Any) -> bool:
    """
    Check if a module attribute should be exposed as a filter.

    Only plain functions qualify; names starting with an underscore do not.

    Args:
        attr: Attribute to check.

    Returns:
        True if the attribute is a public function.

    Example:
        >>> is_public_callable(str.upper)
        False
    """
    if not inspect.isfunction(attr):
        return False
    return not attr.__name__.startswith("_")


def levenshtein(
    source: str,
    target: str,
    insert_cost: int = SUGGESTION_INSERT_COST,
    replace_cost: int = SUGGESTION_REPLACE_COST,
    delete_cost: int = SUGGESTION_DELETE_COST,
) -> int:
    """
    Weighted edit distance turning ``source`` into ``target``.

    Example:
        >>> levenshtein("upper", "uper")
        10
    """
    previous = [i * insert_cost for i in range(len(target) + 1)]
    for i, source_char in enumerate(source, start=1):
        current = [i * delete_cost]
        for j, target_char in enumerate(target, start=1):
            current.append(
                min(
                    previous[j] + delete_cost,
                    current[j - 1] + insert_cost,
                    previous[j - 1] + (0 if source_char == target_char else replace_cost),
                )
            )
        previous = current
    return previous[-1]


def get_suggestion(items: Iterable[str], value: str) -> str | None:
    """
    Find the item that looks most like ``value``.

    An item qualifies when its weighted distance to ``value`` is non-zero and
    below a threshold that grows with the length of ``value``.

    Args:
        items: Candidate names.
        value: The name the caller asked for.

    Returns:
        The closest candidate, or None if nothing is close enough.
    """
    best = None
    threshold = (len(value) / 4 + 1) * 10 + 0.1
    for item in dict.fromkeys(items):
        distance = levenshtein(item, value)
        if 0 < distance < threshold:
            threshold = distance
            best = item
    return best


def _import_attribute(dotted: str, description: str) -> Any:
    """Import ``module:attr.path`` or ``module.attr`` and return the attribute."""
    if CALLBACK_MODULE_SEPARATOR in dotted:
        module_path, attr_path = dotted.split(CALLBACK_MODULE_SEPARATOR, 1)
        try:
            target = importlib.import_module(module_path)
        except ImportError as e:
            raise InvalidFilterCallbackError(f"Cannot import module for {description}: {e!s}") from e
    else:
        # Longest importable prefix wins: "pkg.mod.Class.attr"
        parts = dotted.split(".")
        target = None
        for index in range(len(parts) - 1, 0, -1):
            try:
                target = importlib.import_module(".".join(parts[:index]))
            except ImportError:
                continue
            attr_path = ".".join(parts[index:])
            break
        if target is None:
            raise InvalidFilterCallbackError(f"Cannot import module for {description}")

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise InvalidFilterCallbackError(f"Cannot resolve {description}: {e!s}") from e
    return target


def resolve_callback(callback: Any) -> Callable:
    """
    Turn a registered callback reference into something callable.

    Accepted forms:
    - any callable (functions, bound methods, callable objects, classes)
    - ``"package.module:function"`` or ``"package.module:Class.method"``
    - ``"package.module.Class::method"``
    - ``"package.module.function"``
    - ``(object_or_class, "method")`` pairs, where the first item may itself be
      a dotted string

    Raises:
        InvalidFilterCallbackError: If the reference cannot be resolved or does
            not point to a callable.
    """
    if isinstance(callback, str):
        description = f"callback '{callback}'"
        if CALLBACK_METHOD_SEPARATOR in callback:
            owner, method = callback.split(CALLBACK_METHOD_SEPARATOR, 1)
            resolved = resolve_callback((owner, method))
        else:
            resolved = _import_attribute(callback, description)
    elif isinstance(callback, (tuple, list)) and len(callback) == 2 and isinstance(callback[1], str):  # noqa: PLR2004
        owner, method = callback
        if isinstance(owner, str):
            owner = _import_attribute(owner, f"callback owner '{owner}'")
        try:
            resolved = getattr(owner, method)
        except AttributeError as e:
            raise InvalidFilterCallbackError(f"Cannot resolve method '{method}': {e!s}") from e
    else:
        resolved = callback

    if not callable(resolved):
        raise InvalidFilterCallbackError(f"{resolved!r} is not callable")
    return resolved


def first_sentence(docstring: str | None, max_length: int = 100) -> str:
    """Return the first sentence of a docstring, trimmed to ``max_length``."""
    if not docstring:
        return "No description available"
    text = " ".join(inspect.cleandoc(docstring).split("\n\n")[0].split())
    sentence = text.split(". ")[0].rstrip(".")
    if len(sentence) > max_length:
        sentence = sentence[: max_length - 3] + "..."
    return sentence
