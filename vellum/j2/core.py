import re
from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateSyntaxError, Undefined, UndefinedError

from vellum.exceptions import VellumError
from vellum.j2.exceptions import TemplateError, TemplateValidationError
from vellum.logger import logger
from vellum.runtime.registry import FilterRegistry
from vellum.settings import VellumSettings

UNKNOWN_FILTER_PATTERN = re.compile(r"No filter named '([^']+)'")


def unknown_filter_name(error: Exception) -> str:
    """Return the filter name from Jinja2's "No filter named" compile error, or an empty string."""
    match = UNKNOWN_FILTER_PATTERN.search(getattr(error, "message", None) or str(error))
    return match.group(1) if match else ""


class RegistryFilters(dict):
    """Filters mapping for a Jinja2 environment, backed by a FilterRegistry.

    The dict itself holds the environment's own filters (Jinja2 defaults).
    Names known to the registry shadow them and are served through
    ``FilterRegistry.resolve_classic``. Unknown names fall through to the
    registry's dynamic resolvers when there are any, so that the dynamic
    dispatcher reports UndefinedFilterError at call time.
    """

    def __init__(self, registry: FilterRegistry, defaults: Mapping[str, Callable] | None = None):
        super().__init__(defaults or {})
        self.registry = registry

    def _served_by_registry(self, name: str) -> bool:
        if name in self.registry:
            return True
        return not dict.__contains__(self, name) and bool(self.registry.dynamic_resolvers)

    def __getitem__(self, name: str) -> Callable:
        if isinstance(name, str) and self._served_by_registry(name):
            return self.registry.resolve_classic(name)
        return super().__getitem__(name)

    def __contains__(self, name: object) -> bool:
        return dict.__contains__(self, name) or (isinstance(name, str) and self._served_by_registry(name))

    def get(self, name: str, default: Any = None) -> Any:
        try:
            return self[name]
        except KeyError:
            return default


class TemplateRenderer:
    """Jinja2 rendering front-end for a FilterRegistry.

    Owns one Jinja2 environment whose filters come from the registry, caches
    compiled templates, and centralizes error handling:

    - compile failures become TemplateValidationError
    - undefined variables and other render failures become TemplateError
    - errors raised by the filter layer itself (e.g. UndefinedFilterError)
      propagate unchanged
    """

    def __init__(self, registry: FilterRegistry, settings: VellumSettings | None = None):
        settings = settings or VellumSettings()
        self._registry = registry
        self._environment = Environment(
            undefined=StrictUndefined if settings.strict_undefined else Undefined,
            extensions=["jinja2.ext.loopcontrols"],
            autoescape=settings.autoescape,
        )
        self._environment.filters = RegistryFilters(registry, self._environment.filters)
        self.compile_template = lru_cache(maxsize=256)(self._compile_template)

    @property
    def environment(self) -> Environment:
        """Get the Jinja2 environment."""
        return self._environment

    @property
    def registry(self) -> FilterRegistry:
        """Get the filter registry backing the environment."""
        return self._registry

    def _compile_template(self, template_str: str) -> Any:
        """Compile a template string.

        Raises:
            TemplateValidationError: If the template has syntax errors or uses
                an unknown filter.
        """
        try:
            compiled = self._environment.from_string(template_str)
        except VellumError:
            raise
        except Exception as e:
            raise TemplateValidationError(
                f"Template compilation failed: {e}",
                template=template_str,
                lineno=getattr(e, "lineno", None),
                filter_name=unknown_filter_name(e),
            ) from e
        logger.debug(f"Compiled template (length={len(template_str)})")
        return compiled

    def render_string(
        self, template_str: str, context: dict[str, Any] | None = None, error_context: str = ""
    ) -> str:
        """Render a Jinja2 template string.

        Args:
            template_str: The template string to render.
            context: Variables for rendering.
            error_context: Description for error messages.

        Returns:
            The rendered string.

        Raises:
            TemplateValidationError: If the template cannot be compiled.
            TemplateError: If rendering fails.
        """
        if not isinstance(template_str, str):
            raise TemplateValidationError(
                f"Expected string for 'template_str', got {type(template_str).__name__}"
            )

        template = self.compile_template(template_str)
        context_info = f" ({error_context})" if error_context else ""
        try:
            result = template.render(context or {})
        except VellumError:
            raise
        except UndefinedError as e:
            raise TemplateError(f"Undefined variable in template{context_info}: {e}", template=template_str) from e
        except TemplateSyntaxError as e:
            raise TemplateError(
                f"Template syntax error{context_info}: {e}", template=template_str, lineno=e.lineno
            ) from e
        except Exception as e:
            logger.exception(f"Unexpected error rendering template (length={len(template_str)}){context_info}: {e}")
            raise TemplateError(f"Template rendering error{context_info}: {e}", template=template_str) from e

        logger.debug(f"Rendered template: input_len={len(template_str)}, output_len={len(result)}")
        return result

    def validate_template(self, template_str: str) -> tuple[bool, str]:
        """Validate template syntax without rendering.

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            self.compile_template(template_str)
            return (True, "")
        except VellumError as e:
            return (False, str(e))
