"""Jinja2-specific exceptions for Vellum."""

from vellum.exceptions import VellumError


class TemplateError(VellumError):
    """
    Raised when a template cannot be rendered.

    ``lineno`` is the template line Jinja2 blamed, when it reported one.
    """

    def __init__(self, message: str = "", template: str = "", lineno: int | None = None):
        location = f" (line {lineno})" if lineno else ""
        super().__init__(f"{message}{location}")
        self.template = template
        self.lineno = lineno

    @property
    def source_line(self) -> str:
        """The template line the error points at, or an empty string."""
        lines = self.template.splitlines()
        if self.lineno and 0 < self.lineno <= len(lines):
            return lines[self.lineno - 1]
        return ""


class TemplateValidationError(TemplateError):
    """Raised when a template cannot be compiled, for instance because no filter serves a name it uses."""

    def __init__(
        self, message: str = "", template: str = "", lineno: int | None = None, filter_name: str = ""
    ):
        super().__init__(message, template=template, lineno=lineno)
        self.filter_name = filter_name
