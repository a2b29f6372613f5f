import inspect
import warnings
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from threading import RLock
from types import ModuleType
from typing import Any

from vellum.constants import CONTENT_AWARE_MARKER, STRIP_HTML_FILTER_HINT, ContentType
from vellum.exceptions import (
    ContentTypeMismatchWarning,
    FilterShouldBeContentAwareWarning,
    InvalidFilterCallbackError,
    ResourceError,
    UndefinedFilterError,
)
from vellum.logger import logger
from vellum.runtime.filter_info import FilterInfo
from vellum.runtime.html import is_markup, mark_safe, to_raw
from vellum.runtime.resolution import unpack_outcome
from vellum.utils import first_sentence, get_suggestion, import_module_from_path, is_public_callable, resolve_callback


@dataclass
class FilterEntry:
    """One statically registered filter.

    Attributes:
        name: Canonical (lowercase) filter name.
        callback: The callback as registered (callable, import string or
            ``(owner, "method")`` pair).
        content_aware: None until classified, then True or False for good.
        resolved: The callable ``callback`` resolved to, once classified.
        sources: Registration metadata (timestamp, module name/path, ...).
    """

    name: str
    callback: Any
    content_aware: bool | None = None
    resolved: Callable | None = None
    sources: dict[str, Any] = field(default_factory=dict)

    @property
    def is_classified(self) -> bool:
        return self.content_aware is not None


def is_content_aware_callable(callback: Callable) -> bool:
    """Decide whether a callable expects a FilterInfo as its first argument.

    An explicit ``@content_aware`` tag wins. Otherwise the first declared
    parameter must be annotated with exactly the FilterInfo type.

    Args:
        callback: An already resolved callable.

    Returns:
        True if the callable is content-aware.
    """
    marker = getattr(callback, CONTENT_AWARE_MARKER, None)
    if marker is None and not (inspect.isroutine(callback) or inspect.isclass(callback)):
        marker = getattr(getattr(callback, "__call__", None), CONTENT_AWARE_MARKER, None)
    if marker is not None:
        return bool(marker)

    try:
        try:
            sig = inspect.signature(callback, eval_str=True)
        except Exception:  # noqa: BLE001
            # unresolvable string annotations, fall back to raw ones
            sig = inspect.signature(callback)
    except (TypeError, ValueError):
        return False

    params = list(sig.parameters.values())
    if not params:
        return False

    annotation = params[0].annotation
    if isinstance(annotation, str):
        return annotation in (FilterInfo.__name__, f"{FilterInfo.__module__}.{FilterInfo.__qualname__}")
    return annotation is FilterInfo


class FilterRegistry:
    """Two-tier registry mapping filter names to callbacks.

    Static filters are registered under a name and found by case-insensitive
    lookup. Dynamic filters are fallback resolvers consulted, most recent first,
    for names that have no static entry.

    Compiled template code gets filters through the classic path:

        registry.resolve_classic("upper")("abc")
        registry["upper"]("abc")

    The first lookup of a name builds a wrapper and memoizes it; registering the
    name again drops the memoized wrapper. Content-aware filters get a fresh
    FilterInfo from the wrapper; callers that already track one use
    ``invoke_content_aware`` instead.

    Registration, classification and memoization are serialized by a re-entrant
    lock. Filters themselves run outside of it.
    """

    def __init__(self, name: str = "filters"):
        self.name = name
        self._static: dict[str, FilterEntry] = {}
        self._dynamic: list[Any] = []
        self._resolved: dict[str, Callable] = {}
        self._lock = RLock()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} static={len(self._static)} dynamic={len(self._dynamic)}>"

    ###########################################################################
    # REGISTRATION
    ###########################################################################

    def register(
        self, name: str | None, callback: Any, content_aware: bool | None = None, **metadata: Any
    ) -> "FilterRegistry":
        """Register a static filter, or a dynamic resolver when ``name`` is empty.

        Args:
            name: Filter name as used in templates. Empty or None registers
                ``callback`` as a dynamic resolver ahead of all earlier ones.
            callback: Callable, import string (``"pkg.mod:func"``,
                ``"pkg.mod.Class::method"``) or ``(owner, "method")`` pair.
            content_aware: Classify up-front instead of inspecting the callback
                on first use. Ignored for dynamic resolvers.
            **metadata: Arbitrary source information kept alongside the entry.

        Returns:
            The registry, for chaining.
        """
        if not name:
            with self._lock:
                self._dynamic.insert(0, callback)
            logger.debug(f"Registered dynamic filter {callback!r} in '{self.name}'")
            return self

        lname = name.lower()
        entry = FilterEntry(
            name=lname,
            callback=callback,
            content_aware=content_aware,
            sources={"registered_at": datetime.now(), **metadata},
        )
        with self._lock:
            self._static[lname] = entry
            dropped = self._resolved.pop(lname, None)

        logger.debug(
            f"Registered filter '{lname}' in '{self.name}'" + (" (memoized wrapper dropped)" if dropped else "")
        )
        return self

    def unregister(self, name: str) -> None:
        """Remove a static filter and its memoized wrapper, if present."""
        lname = name.lower()
        with self._lock:
            self._static.pop(lname, None)
            self._resolved.pop(lname, None)

    def register_from_module(self, module: ModuleType, predicate: Callable[[Any], bool] | None = None) -> int:
        """Register the public functions defined in a module, keyed by attribute name.

        Functions merely imported into the module are skipped.

        Args:
            module: The module to extract filters from.
            predicate: Optional function selecting members; defaults to
                public functions.

        Returns:
            Number of filters registered.
        """
        module_path = getattr(module, "__file__", None)
        module_name = getattr(module, "__name__", None)
        predicate = predicate or is_public_callable

        count = 0
        for attr_name, obj in inspect.getmembers(module, predicate):
            if getattr(obj, "__module__", module_name) != module_name:
                continue
            self.register(attr_name, obj, module_name=module_name, module_path=module_path)
            count += 1

        logger.debug(f"Registered {count} filter(s) from module '{module_name}'")
        return count

    def discover_filters_in_dir(self, dir_path: str | Path, predicate: Callable[[Any], bool] | None = None) -> int:
        """Import every Python file under a directory and register its filters.

        Args:
            dir_path: Path to the directory to scan.
            predicate: Optional member predicate, see ``register_from_module``.

        Returns:
            Number of filters discovered and registered.

        Raises:
            ResourceError: If the directory doesn't exist.
            CoreError: If a module fails to import.
        """
        path = Path(dir_path)
        if not path.is_dir():
            raise ResourceError(
                f"Directory not found: {dir_path}. Couldn't load {self.name}.",
                resource_type=self.name,
                resource_name=str(dir_path),
            )

        total = 0
        for py_file in sorted(path.rglob("*.py")):
            if py_file.name.startswith("__"):
                continue
            module = import_module_from_path(py_file.stem, py_file)
            total += self.register_from_module(module, predicate)
        return total

    ###########################################################################
    # INTROSPECTION
    ###########################################################################

    def list_names(self) -> set[str]:
        """Return the canonical names of all static filters."""
        with self._lock:
            return set(self._static)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._static

    def __len__(self) -> int:
        return len(self._static)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.list_names()))

    @property
    def dynamic_resolvers(self) -> tuple[Any, ...]:
        """Dynamic resolvers in consultation order (most recently registered first)."""
        with self._lock:
            return tuple(self._dynamic)

    def get_entry(self, name: str) -> FilterEntry | None:
        """Return the static entry for ``name`` (any casing), or None."""
        return self._static.get(name.lower())

    def is_content_aware(self, name: str) -> bool:
        """Classify a static filter (if needed) and report whether it is content-aware.

        Raises:
            UndefinedFilterError: If no static filter has that name.
        """
        entry = self._get_entry_or_raise(name)
        _, aware = self._prepare(entry)
        return aware

    def get_filter_info(self, name: str) -> dict[str, Any] | None:
        """Describe a static filter for diagnostics.

        Args:
            name: The filter name, any casing.

        Returns:
            A dictionary with filter metadata or None if not found.
        """
        entry = self.get_entry(name)
        if entry is None:
            return None

        callback, aware = self._prepare(entry)
        return {
            "name": entry.name,
            "content_aware": aware,
            "callback": callback,
            "description": first_sentence(getattr(callback, "__doc__", None)),
            **entry.sources,
        }

    ###########################################################################
    # CLASSIC ACCESS
    ###########################################################################

    def resolve_classic(self, name: str) -> Callable:
        """Return a ready-to-call filter using the classic calling convention.

        The result is memoized under the lowercase name, so any casing of the
        same name yields the same callable until the name is registered again.
        Unknown names yield a dispatcher over the dynamic resolvers; it raises
        UndefinedFilterError when called if nothing handles the name.

        Raises:
            InvalidFilterCallbackError: If the static callback cannot be resolved.
        """
        lname = name.lower()
        with self._lock:
            wrapper = self._resolved.get(lname)
            if wrapper is not None:
                return wrapper

            entry = self._static.get(lname)
            if entry is not None:
                wrapper = self._build_wrapper(entry)
                kind = "content-aware" if entry.content_aware else "classic"
            else:
                wrapper = self._build_dynamic_wrapper(lname, name)
                kind = "dynamic"
            self._resolved[lname] = wrapper

        logger.debug(f"Memoized {kind} wrapper for filter '{lname}'")
        return wrapper

    def __getitem__(self, name: str) -> Callable:
        return self.resolve_classic(name)

    ###########################################################################
    # CONTENT-AWARE ACCESS
    ###########################################################################

    def invoke_content_aware(self, name: str, info: FilterInfo, *args: Any, **kwargs: Any) -> Any:
        """Call a static filter on behalf of a caller that tracks the content type.

        Content-aware filters receive ``info`` as their first argument and are
        responsible for updating it. Classic filters are called with ``args``
        only; a non-text ``info`` triggers a ContentTypeMismatchWarning, and a
        markup result triggers a FilterShouldBeContentAwareWarning, switches
        ``info`` to HTML and is returned as a plain string. Both diagnostics
        are also logged on every call.

        Dynamic filters are not reachable through this path.

        Raises:
            UndefinedFilterError: If no static filter has that name.
        """
        entry = self._get_entry_or_raise(name)
        callback, aware = self._prepare(entry)
        if aware:
            return callback(info, *args, **kwargs)

        if info.content_type != ContentType.TEXT:
            hint = f", try to prepend |{STRIP_HTML_FILTER_HINT}." if info.content_type == ContentType.HTML else "."
            message = f"Filter |{name} is called with incompatible content type {str(info.content_type).upper()}{hint}"
            logger.warning(message)
            warnings.warn(message, ContentTypeMismatchWarning, stacklevel=2)

        result = self.resolve_classic(name)(*args, **kwargs)
        if is_markup(result):
            message = f"Filter |{name} should be changed to content-aware filter."
            logger.warning(message)
            warnings.warn(message, FilterShouldBeContentAwareWarning, stacklevel=2)
            info.content_type = ContentType.HTML
            result = to_raw(result)
        return result

    ###########################################################################
    # INTERNALS
    ###########################################################################

    def _get_entry_or_raise(self, name: str) -> FilterEntry:
        entry = self.get_entry(name)
        if entry is None:
            raise UndefinedFilterError(name, self._suggest(name))
        return entry

    def _suggest(self, name: str) -> str | None:
        with self._lock:
            candidates = list(self._static)
        return get_suggestion(candidates, name.lower())

    def _prepare(self, entry: FilterEntry) -> tuple[Callable, bool]:
        """Resolve and classify an entry once; later calls return the cached result."""
        with self._lock:
            if entry.resolved is None:
                try:
                    entry.resolved = resolve_callback(entry.callback)
                except InvalidFilterCallbackError as e:
                    raise InvalidFilterCallbackError(str(e), filter_name=entry.name) from e

            if entry.content_aware is None:
                entry.content_aware = is_content_aware_callable(entry.resolved)
                logger.debug(
                    f"Classified filter '{entry.name}' as {'content-aware' if entry.content_aware else 'classic'}"
                )
            return entry.resolved, entry.content_aware

    def _build_wrapper(self, entry: FilterEntry) -> Callable:
        callback, aware = self._prepare(entry)
        if not aware:
            return callback

        def content_aware_wrapper(*args: Any, **kwargs: Any) -> Any:
            info = FilterInfo()
            if args and is_markup(args[0]):
                args = (to_raw(args[0]), *args[1:])
                info.content_type = ContentType.HTML
            result = callback(info, *args, **kwargs)
            return mark_safe(result) if info.content_type == ContentType.HTML else result

        content_aware_wrapper.__name__ = getattr(callback, "__name__", entry.name)
        content_aware_wrapper.__doc__ = getattr(callback, "__doc__", None)
        return content_aware_wrapper

    def _build_dynamic_wrapper(self, lname: str, name: str) -> Callable:
        def dynamic_filter(*args: Any, **kwargs: Any) -> Any:
            for resolver in self.dynamic_resolvers:
                handled, value = unpack_outcome(resolve_callback(resolver)(lname, *args, **kwargs))
                if handled:
                    return value

                promoted = self._promote(lname)
                if promoted is not None:
                    return promoted(*args, **kwargs)

            raise UndefinedFilterError(name, self._suggest(name))

        dynamic_filter.__name__ = lname
        return dynamic_filter

    def _promote(self, lname: str) -> Callable | None:
        """Memoize and return the wrapper of a static entry registered after the dispatcher.

        Returns None while no static entry exists for the name.
        """
        with self._lock:
            entry = self._static.get(lname)
            if entry is None:
                return None
            wrapper = self._build_wrapper(entry)
            self._resolved[lname] = wrapper
        logger.debug(f"Promoted dynamic filter '{lname}' to its static entry")
        return wrapper
