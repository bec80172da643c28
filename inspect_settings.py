#!/usr/bin/env python3
"""
Settings Inspector CLI

Show how a program's options resolve from their defaults, a configuration
file and an argument vector, without running the program itself.
"""

import importlib

import typer
from loguru import logger
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from typing_extensions import Annotated

from config import settings
from program_option import ProgramOption
from settings_loader import HelpRequested, SettingsLoader, SettingsLoaderError

app = typer.Typer(
    help="Inspect resolved program settings",
    add_completion=False,
)
console = Console()


# =============================================================================
# LOGGING SETUP
# =============================================================================


def setup_logging(level: str | None = None) -> None:
    """
    Configure loguru with rich handler for console output.

    Should be called once at application entry point.
    """
    if level is None:
        level = str(settings.get("logging.level", "INFO"))  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]

    # Remove default handler
    logger.remove()
    logger.enable("settings_loader")

    _ = logger.add(
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
        ),
        format="{message}",
        level=level,
    )


def resolve_option_type(target: str | None) -> type[ProgramOption]:
    """
    Import a ProgramOption enumeration from a `module:ClassName` reference.

    Falls back to `cli.default_options` from settings when target is None.
    """
    if target is None:
        target = str(settings.get("cli.default_options", "demo_options:DemoOption"))  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]

    module_name, _, class_name = target.partition(":")
    if not module_name or not class_name:
        raise typer.BadParameter(f"expected 'module:ClassName', got {target!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"cannot import {module_name!r}: {e}") from e

    option_type = getattr(module, class_name, None)
    if not isinstance(option_type, type) or not issubclass(option_type, ProgramOption):
        raise typer.BadParameter(f"{target!r} is not a ProgramOption enumeration")

    return option_type


OptionsTarget = Annotated[
    str | None,
    typer.Option(
        "--options",
        "-O",
        help="Option enumeration as 'module:ClassName'. Defaults to cli.default_options.",
    ),
]


@app.command()
def show(
    args: Annotated[
        list[str] | None,
        typer.Argument(
            help="Argument vector to apply, after '--' (e.g. -- -v true --port 9000)",
        ),
    ] = None,
    options: OptionsTarget = None,
    config: Annotated[
        str | None,
        typer.Option(
            "--config",
            "-c",
            help="key=value configuration file. A missing file is not an error.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log every value as it is applied"),
    ] = False,
) -> None:
    """
    Resolve and print settings for an option enumeration.

    Examples:
        # Defaults only
        inspect-settings show

        # Config file, then arguments on top
        inspect-settings show -c app.conf -- --port 9000 -n
    """
    setup_logging("DEBUG" if verbose else None)

    option_type = resolve_option_type(options)
    loader = SettingsLoader(option_type)

    try:
        if config is not None and not loader.read_config(config):
            console.print(f"[dim]No configuration file at {escape(config)}, using defaults[/dim]")
        loader.apply_argument_vector(args or [])
    except HelpRequested as e:
        console.print(e.help_text, end="", markup=False, highlight=False)
        raise typer.Exit(code=e.exit_code)
    except SettingsLoaderError as e:
        console.print(f"[bold red]✗[/bold red] {escape(str(e))}")
        raise typer.Exit(code=e.exit_code)

    table = Table(title=f"{option_type.__name__} settings")
    table.add_column("Option", style="cyan")
    table.add_column("Flags")
    table.add_column("Value", style="green")
    for option, value in loader.get_settings().items():
        flags = f"-{option.short_flag}, --{option.long_flag}"
        marker = "" if value == option.default_value else " *"
        table.add_row(option.name, flags, f"{escape(value)}{marker}")

    console.print(table)


@app.command()
def options(options: OptionsTarget = None) -> None:
    """List the options declared by an enumeration."""
    option_type = resolve_option_type(options)
    console.print(f"[bold]{option_type.__name__} options:[/bold]\n")
    for option in option_type:
        console.print(
            f"  -{option.short_flag}, --{option.long_flag}  [dim](default: {escape(option.default_value)})[/dim]",
            highlight=False,
        )
        console.print(f"      {escape(option.description)}", highlight=False)


if __name__ == "__main__":
    app()
