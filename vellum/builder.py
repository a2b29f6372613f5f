import importlib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from vellum.constants import VELLUM_DEFAULT_FILTERS_DIR
from vellum.exceptions import CoreError, InitializationError, ResourceError, SettingsError
from vellum.logger import logger
from vellum.runtime.registry import FilterRegistry
from vellum.settings import VellumSettings


class RegistryBuilder:
    """
    Builder class for constructing FilterRegistry objects with a fluent interface.

    Usage Examples:
        registry = (
            RegistryBuilder()
            .with_settings_path("vellum.yaml")
            .with_filters({"shout": shout})
            .with_dynamic(fallback_resolver)
            .build()
        )

    Registration order performed by ``build()`` (later wins on name clashes):
      1. modules listed in ``settings.imported_packages``
      2. directories listed in ``settings.local_filters``
      3. ``settings.filters`` (name -> callback import string)
      4. ``with_filters()`` entries
      5. ``with_dynamic()`` resolvers, in call order (the last one is consulted first)
    """

    def __init__(self):
        self._settings: VellumSettings | None = None
        self._filters: dict[str, Any] = {}
        self._dynamic: list[Callable[..., Any]] = []
        self._name = "filters"

    def with_settings_object(self, settings_object: VellumSettings) -> "RegistryBuilder":
        """
        Set the VellumSettings object for the builder.

        Args:
            settings_object: The VellumSettings object.

        Returns:
            The builder instance for method chaining.
        """
        self._settings = settings_object
        return self

    def with_settings_path(self, settings_path: str | Path) -> "RegistryBuilder":
        """
        Create the VellumSettings from a YAML file path.
        This only takes effect if the settings object has not been set yet.

        Args:
            settings_path: The path to a YAML settings file.

        Returns:
            The builder instance for method chaining.
        """
        if not self._settings:
            try:
                self._settings = VellumSettings.load(settings_file=str(settings_path))
            except (SettingsError, ResourceError) as e:
                raise InitializationError(f"Failed to load settings from '{settings_path}': {e}") from e
        return self

    def with_filters(self, filters: Mapping[str, Any]) -> "RegistryBuilder":
        """Add static filters, registered after everything the settings provide."""
        self._filters.update(filters)
        return self

    def with_dynamic(self, resolver: Callable[..., Any]) -> "RegistryBuilder":
        """Add a dynamic resolver."""
        self._dynamic.append(resolver)
        return self

    def with_name(self, name: str) -> "RegistryBuilder":
        """Set the registry name used in log and error messages."""
        self._name = name
        return self

    def build(self) -> FilterRegistry:
        """
        Build the FilterRegistry.

        Returns:
            The assembled registry.

        Raises:
            InitializationError: If a module or directory from the settings cannot be loaded.
        """
        registry = FilterRegistry(self._name)
        settings = self._settings

        if settings:
            self._configure_logging(registry, settings)
            self._register_packages(registry, settings.imported_packages)
            self._register_local_dirs(registry, settings)
            for name, callback in settings.filters.items():
                registry.register(name, callback, module_name="settings")

        for name, callback in self._filters.items():
            registry.register(name, callback)

        for resolver in self._dynamic:
            registry.register(None, resolver)

        logger.debug(f"Built registry '{registry.name}' with {len(registry)} static filter(s)")
        return registry

    def _configure_logging(self, registry: FilterRegistry, settings: VellumSettings) -> None:
        logger.set_level(settings.log_level)
        if settings.log_dir:
            logger.set_log_file(registry.name, settings.log_dir, settings.log_level)

    def _register_packages(self, registry: FilterRegistry, packages: list[str]) -> None:
        for package in packages:
            try:
                module = importlib.import_module(package)
            except ImportError as e:
                raise InitializationError(f"Failed to import filter package '{package}': {e}") from e
            registry.register_from_module(module)

    def _register_local_dirs(self, registry: FilterRegistry, settings: VellumSettings) -> None:
        for dir_path in settings.local_filters:
            if not Path(dir_path).is_dir() and Path(dir_path).name == VELLUM_DEFAULT_FILTERS_DIR:
                logger.debug(f"Skipping missing default filters directory '{dir_path}'")
                continue
            try:
                registry.discover_filters_in_dir(dir_path)
            except (ResourceError, CoreError) as e:
                raise InitializationError(f"Failed to load filters from '{dir_path}': {e}") from e
