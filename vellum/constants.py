from enum import StrEnum


class ContentType(StrEnum):
    """
    Content kinds a value can carry while it travels through a chain of filters.

    Attributes:
        TEXT: Plain text. Every fresh FilterInfo starts here.
        HTML: HTML markup, already escaped/safe for output.
        XHTML: XHTML markup.
        XML: XML markup.
        JS: JavaScript source.
        CSS: CSS source.
        ICAL: iCalendar data.
    """

    TEXT = "text"
    HTML = "html"
    XHTML = "xhtml"
    XML = "xml"
    JS = "js"
    CSS = "css"
    ICAL = "ical"


VELLUM_DEFAULT_SETTINGS_FILE = "vellum.yaml"
VELLUM_SETTINGS_ENV_VAR = "VELLUM_SETTINGS"
VELLUM_SETTINGS_ENV_PREFIX = "VELLUM_SETTINGS_"

VELLUM_DEFAULT_FILTERS_DIR = "filters"
VELLUM_DEFAULT_LOG_LEVEL = "WARNING"
VELLUM_DEFAULT_LOG_DIR = ".vellum/logs"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Attribute set on callables tagged with @content_aware
CONTENT_AWARE_MARKER = "vellum_content_aware"

# Weighted edit distance used for "did you mean" suggestions
SUGGESTION_INSERT_COST = 10
SUGGESTION_REPLACE_COST = 11
SUGGESTION_DELETE_COST = 10

# Separators accepted in string-encoded callbacks
CALLBACK_MODULE_SEPARATOR = ":"
CALLBACK_METHOD_SEPARATOR = "::"

# Filter suggested to callers that feed markup into a plain text filter
STRIP_HTML_FILTER_HINT = "stripHtml"
