import json
import os
import textwrap
from pathlib import Path
from typing import Any

import typer
from tabulate import tabulate
from termcolor import colored

from vellum.builder import RegistryBuilder
from vellum.cli.constants import (
    CWD,
    DESCRIPTION_WRAP_WIDTH,
    FILTER_KIND_CLASSIC,
    FILTER_KIND_CONTENT_AWARE,
)
from vellum.cli.exceptions import CLIShowError
from vellum.constants import VELLUM_DEFAULT_SETTINGS_FILE, VELLUM_SETTINGS_ENV_VAR
from vellum.exceptions import SettingsError, VellumError
from vellum.runtime.registry import FilterRegistry
from vellum.settings import VellumSettings


def show(
    ctx: typer.Context,
    filters: bool = typer.Option(False, "--filters", "-f", help="Display the registered filters"),
    settings: bool = typer.Option(False, "--settings", help="Display current Vellum settings"),
    all: bool = typer.Option(False, "--all", "-a", help="Display all information"),  # noqa: A002
) -> None:
    """
    Displays summary info about the configured filters.
    """
    if not any([filters, settings, all]):
        raise typer.BadParameter("You must provide at least one option: --filters, --settings, or --all.")

    settings_path = ctx.obj.get("settings") if ctx.obj else ""
    try:
        vellum_settings = load_settings(settings_path)
        registry = RegistryBuilder().with_settings_object(vellum_settings).build()

        if filters or all:
            show_filters(registry)
        if settings or all:
            show_settings(vellum_settings)

    except SettingsError as e:
        CLIShowError(
            f"Invalid Vellum settings: {e}",
            hint="Pass an existing YAML file with --settings or set VELLUM_SETTINGS.",
            settings_file=settings_source(settings_path),
            cause=e,
        ).exit()

    except VellumError as e:
        CLIShowError(
            f"Could not build the filter registry: {e}",
            hint="Check that every filter package, directory and callback in the settings can be imported.",
            settings_file=settings_source(settings_path),
            cause=e,
        ).exit()

    except Exception as e:
        CLIShowError(
            f"Failed to show requested information: {e}",
            hint="Check your configuration and try again.",
            settings_file=settings_source(settings_path),
            cause=e,
        ).exit()


def settings_source(settings_path: str | None) -> str | None:
    """Name the settings file a command reads, for error reports. None means defaults only."""
    explicit = settings_path or os.getenv(VELLUM_SETTINGS_ENV_VAR)
    if explicit:
        return explicit
    if Path(VELLUM_DEFAULT_SETTINGS_FILE).exists():
        return VELLUM_DEFAULT_SETTINGS_FILE
    return None


def load_settings(settings_path: str | None) -> VellumSettings:
    """Load settings from a file when one is available, else use defaults.

    Args:
        settings_path: Path given on the command line, possibly empty.

    Returns:
        The settings to build the registry from.
    """
    if settings_source(settings_path):
        return VellumSettings.load(settings_file=settings_path or None)
    return VellumSettings()


def show_filters(registry: FilterRegistry) -> None:
    """Display the registered filters."""
    show_formatted_table(
        "FILTERS",
        render_filters_table_data(registry),
        ["Filter Name", "Kind", "Description", "Source (python module)"],
    )


def show_settings(settings: VellumSettings) -> None:
    """Display the Vellum settings."""
    show_formatted_table("VELLUM SETTINGS", render_table_data(settings.as_dict), ["Setting", "Value"])


def show_formatted_table(banner_text: str, table_data: list[list[str]], headers: list[str]) -> None:
    """Display information in a formatted table.

    Args:
        banner_text: The text to display in the banner.
        table_data: Rows of the table.
        headers: The headers for the table.
    """
    if not table_data:
        typer.echo(f"{banner_text}: nothing to display.")
        return

    colored_headers = get_colored_headers(headers, "blue")
    colalign = ["center"] + ["left"] * (len(headers) - 1)
    table = tabulate(table_data, headers=colored_headers, tablefmt="rounded_grid", colalign=colalign)
    display_banner(banner_text, table)
    typer.echo(table)


def render_filters_table_data(registry: FilterRegistry) -> list[list[str]]:
    """Render the static filters of a registry as a list of lists.

    Args:
        registry: The registry to describe.

    Returns:
        The table data.
    """
    table_data = []
    for name in registry:
        info = registry.get_filter_info(name)
        kind = FILTER_KIND_CONTENT_AWARE if info["content_aware"] else FILTER_KIND_CLASSIC
        description = textwrap.fill(info["description"], width=DESCRIPTION_WRAP_WIDTH)
        table_data.append(get_colored_row(name, kind, description, get_filter_source(info)))
    return table_data


def get_filter_source(info: dict[str, Any]) -> str:
    """Get source information from filter metadata.

    Args:
        info: Metadata returned by FilterRegistry.get_filter_info.

    Returns:
        The formatted source.
    """
    module_path = info.get("module_path")
    if module_path:
        path = Path(module_path)
        try:
            parts = list(path.relative_to(CWD).with_suffix("").parts)
            return ".".join(parts)
        except ValueError:
            return str(path)

    module_name = info.get("module_name") or getattr(info["callback"], "__module__", None)
    return module_name or "Unknown"


def render_table_data(
    data: dict[str, Any], key_color: str = "cyan", value_color: str = "yellow"
) -> list[list[str]]:
    """Render a dictionary as a list of lists.

    Args:
        data: The dictionary to render.
        key_color: The color for the keys.
        value_color: The color for the values.

    Returns:
        The table data.
    """
    return [
        [colored(key, key_color, attrs=["bold"]), format_value(value, value_color)] for key, value in data.items()
    ]


def format_value(value: Any, color: str = "yellow") -> str:
    """Format the value for display in the table.

    Args:
        value: The value to format.
        color: The color to use for the formatted value.

    Returns:
        The formatted value.
    """
    if isinstance(value, dict):
        value_str = json.dumps(value, indent=2)
        value_str = value_str[1:-1].strip()
    else:
        value_str = str(value)
    return colored(value_str, color)


def get_colored_headers(headers: list[str], color: str) -> list[str]:
    """Color the headers."""
    return [colored(header, color, attrs=["bold"]) for header in headers]


def display_banner(banner_text: str, table: str) -> None:
    """Create a banner with the given text and display it above the table.

    Args:
        banner_text: The text to display in the banner.
        table: The table string to determine the width for centering the banner.
    """
    banner = colored(banner_text, "magenta", attrs=["bold", "underline"])
    table_width = len(table.split("\n")[0])
    typer.echo("\n\n" + banner.center(table_width + 5))


def get_colored_row(name: str, kind: str, desc: str, source: str) -> list[str]:
    """Create a colored table row for a filter."""
    return [
        colored(name, "cyan", attrs=["bold"]),
        colored(kind, "magenta" if kind == FILTER_KIND_CONTENT_AWARE else "white"),
        colored(desc, "yellow"),
        colored(source, "light_green"),
    ]
