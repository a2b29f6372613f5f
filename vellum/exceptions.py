"""
Vellum exception and warning hierarchy.

This module defines the exceptions raised by the filter layer, organized
hierarchically with clear inheritance paths, plus the warning categories
used for non-fatal content-type diagnostics.
"""

###############################################################################
# ROOT EXCEPTION
###############################################################################


class VellumError(Exception):
    """
    Root exception class for all Vellum errors.

    This exception serves as the base class for the entire exception hierarchy.
    It should never be raised directly but rather inherited from.
    """


###############################################################################
# CORE EXCEPTIONS
###############################################################################


class CoreError(VellumError):
    """
    Base exception class for core functionality errors.

    These relate to fundamental operations such as module loading and discovery.
    """

    def __init__(self, message: str = "", component: str = ""):
        prefix = f"{component}: " if component else ""
        super().__init__(f"{prefix}{message}")
        self.component = component


class InitializationError(CoreError):
    """Raised when a registry cannot be assembled from its configuration."""


###############################################################################
# FILTER EXCEPTIONS
###############################################################################


class FilterError(VellumError):
    """Base for all filter-related errors."""

    def __init__(self, message: str = "", filter_name: str = ""):
        super().__init__(message)
        self.filter_name = filter_name


class UndefinedFilterError(FilterError):
    """
    Raised when a filter name has no static entry and no dynamic resolver claims it.

    Carries the requested name and, when a registered name is close enough,
    a suggestion for what the caller probably meant.
    """

    def __init__(self, filter_name: str, suggestion: str | None = None):
        hint = f", did you mean '{suggestion}'?" if suggestion else "."
        super().__init__(f"Filter '{filter_name}' is not defined{hint}", filter_name=filter_name)
        self.suggestion = suggestion


class InvalidFilterCallbackError(FilterError):
    """Raised when a registered callback cannot be resolved to a callable."""

    def __init__(self, message: str = "", filter_name: str = ""):
        prefix = f"Filter '{filter_name}': " if filter_name else ""
        super().__init__(f"{prefix}{message}", filter_name=filter_name)


###############################################################################
# SETTINGS EXCEPTIONS
###############################################################################


class SettingsError(VellumError):
    """
    Base exception class for settings-related errors.

    These relate to configuration and settings management.
    """

    def __init__(self, message: str = "", setting: str = ""):
        prefix = f"Setting '{setting}': " if setting else ""
        super().__init__(f"{prefix}{message}")
        self.setting = setting


###############################################################################
# RESOURCE EXCEPTIONS
###############################################################################


class ResourceError(VellumError):
    """
    Base exception class for resource access errors.

    These relate to file, module, and other resource access issues.
    """

    def __init__(self, message: str = "", resource_type: str = "", resource_name: str = ""):
        prefix = f"{resource_type} '{resource_name}': " if resource_type and resource_name else ""
        super().__init__(f"{prefix}{message}")
        self.resource_type = resource_type
        self.resource_name = resource_name


###############################################################################
# WARNINGS
###############################################################################


class VellumWarning(UserWarning):
    """Base category for non-fatal diagnostics emitted while invoking filters."""


class ContentTypeMismatchWarning(VellumWarning):
    """A classic filter was invoked while the content context was not plain text."""


class FilterShouldBeContentAwareWarning(VellumWarning):
    """A classic filter returned markup and should be rewritten as content-aware."""
