"""
lictool.cli - Command Line Interface
====================================

This module provides the command-line interface for lictool using Typer.
All output goes through rich; interactive prompts use questionary.

Architecture
------------
    app (main entry point)
    ├── list     - List SPDX license identifiers
    ├── info     - Show details for one license
    ├── add      - Write a license non-interactively
    ├── init     - Pick a license and fill it in interactively
    ├── config   - show / set / path
    └── cache    - clear / path

The global options (``--offline``, ``--refresh``, ``--no-cache``,
``--config``, ``--verbose``) are handled by the app callback, which stores an
:class:`AppState` on the Typer context for the commands to use.

Shell completion comes from Typer: ``lictool --install-completion``.

Usage Examples
--------------
    $ lictool list --osi-approved
    $ lictool info Apache-2.0
    $ lictool add mit --author "Jane Doe" --year 2024
    $ lictool init --path LICENSE.md
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import questionary
import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from lictool import __version__
from lictool.cache import FileCacheStore, MemoryCacheStore
from lictool.catalog import CatalogSource, filter_licenses
from lictool.config import (
    Settings,
    default_config_path,
    load_settings,
    set_setting,
)
from lictool.errors import (
    ConfigError,
    LicenseFileExistsError,
    LictoolError,
    MissingFieldsError,
)
from lictool.fields import build_field_mapping, field_suggestions
from lictool.log import configure_logging
from lictool.models import LicenseTemplate
from lictool.placeholders import REQUIRED_FIELDS, scan_fields
from lictool.resolver import LicenseResolver
from lictool.writer import DEFAULT_LICENSE_FILENAME, write_license


# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="lictool",
    help="Quickly add an SPDX license to your project right from the command line.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=True,
)
config_app = typer.Typer(help="Inspect or edit the lictool configuration.", no_args_is_help=True)
cache_app = typer.Typer(help="Manage the local license cache.", no_args_is_help=True)
app.add_typer(config_app, name="config")
app.add_typer(cache_app, name="cache")

console = Console()

# Field -> option of the add command that supplies it
FIELD_OPTIONS: dict[str, str] = {
    "year": "--year",
    "author": "--author",
    "program": "--program",
    "email": "--email",
}

FIELD_PROMPTS: dict[str, str] = {
    "year": "Please enter the year of creation:",
    "author": "Please enter the author's name:",
    "program": "Please enter the program's name:",
    "email": "Please enter the email:",
}


@dataclass
class AppState:
    """Per-invocation state shared by all commands."""

    settings: Settings
    config_path: Path
    refresh: bool = False
    no_cache: bool = False


def build_resolver(state: AppState) -> LicenseResolver:
    """Wire cache store, catalog and resolver from the current settings."""
    settings = state.settings
    store = MemoryCacheStore() if state.no_cache else FileCacheStore(settings.cache_dir)
    catalog = CatalogSource(
        store,
        base_url=settings.base_url,
        timeout=settings.timeout,
        ttl=settings.cache_ttl,
        offline=settings.offline,
        refresh=state.refresh,
    )
    return LicenseResolver(catalog, defaults=settings.defaults, unfilled=settings.unfilled)


def fail(error: Exception | str) -> typer.Exit:
    """Print an error and return the Exit to raise."""
    rprint(f"[red]Error:[/] {escape(str(error))}")
    return typer.Exit(1)


def _checkbox(value: bool | None) -> str:
    return "[bold green]✔[/]" if value else "[bold red]✘[/]"


# =============================================================================
# Version Callback
# =============================================================================

def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(Panel(
            f"[bold green]lictool[/] version [cyan]{__version__}[/]\n\n"
            f"[dim]SPDX license generator[/]",
            border_style="green",
        ))
        raise typer.Exit()


# =============================================================================
# Main Application Callback
# =============================================================================

@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log cache and network activity."),
    ] = False,
    offline: Annotated[
        bool,
        typer.Option("--offline", help="Use only cached license data."),
    ] = False,
    refresh: Annotated[
        bool,
        typer.Option("--refresh", help="Ignore cache age and re-download license data."),
    ] = False,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Neither read nor write the on-disk cache."),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Path to the config file.",
            envvar="LICTOOL_CONFIG",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """
    [bold]lictool[/] - add an SPDX license to your project.

    [bold]Quick Start:[/]

        lictool init

    [bold]Non-interactive:[/]

        lictool add MIT --author "Jane Doe"
    """
    configure_logging(verbose)
    config_path = config or default_config_path()
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise fail(e)

    if offline:
        settings = settings.model_copy(update={"offline": True})

    ctx.obj = AppState(
        settings=settings,
        config_path=config_path,
        refresh=refresh,
        no_cache=no_cache,
    )


# =============================================================================
# List Command
# =============================================================================

@app.command("list")
def list_licenses(
    ctx: typer.Context,
    deprecated: Annotated[
        bool,
        typer.Option("--deprecated", "-d", help="Only deprecated identifiers."),
    ] = False,
    supported: Annotated[
        bool,
        typer.Option("--supported", "-s", help="Only identifiers that are not deprecated."),
    ] = False,
    osi_approved: Annotated[
        bool,
        typer.Option("--osi-approved", "-o", help="Only OSI approved licenses."),
    ] = False,
    fsf_libre: Annotated[
        bool,
        typer.Option("--fsf-libre", "-f", help="Only FSF free/libre licenses."),
    ] = False,
    table: Annotated[
        bool,
        typer.Option("--table", "-t", help="Show names and flags in a table."),
    ] = False,
) -> None:
    """
    List SPDX license identifiers.

    Supported identifiers are shown in green, deprecated ones in red.

    [bold]Examples:[/]

        lictool list
        lictool list --osi-approved --supported
    """
    state: AppState = ctx.obj
    try:
        licenses = build_resolver(state).list()
    except LictoolError as e:
        raise fail(e)

    selected = filter_licenses(
        licenses,
        deprecated=deprecated,
        supported=supported,
        osi_approved=osi_approved,
        fsf_libre=fsf_libre,
    )

    if not table:
        for lic in selected:
            color = "red" if lic.is_deprecated else "green"
            console.print(f"[bold {color}]{escape(lic.identifier)}[/]", highlight=False)
        return

    result = Table(title=f"SPDX Licenses ({len(selected)})", show_header=True)
    result.add_column("Identifier", style="cyan", no_wrap=True)
    result.add_column("Name")
    result.add_column("OSI", justify="center")
    result.add_column("FSF", justify="center")
    result.add_column("Status")
    for lic in selected:
        result.add_row(
            escape(lic.identifier),
            escape(lic.display_name),
            _checkbox(lic.is_osi_approved),
            _checkbox(lic.is_fsf_libre),
            "[red]deprecated[/]" if lic.is_deprecated else "[green]supported[/]",
        )
    console.print(result)


# =============================================================================
# Info Command
# =============================================================================

@app.command()
def info(
    ctx: typer.Context,
    license_id: Annotated[str, typer.Argument(help="SPDX identifier, e.g. MIT")],
) -> None:
    """
    Show details about a license.

    [bold]Example:[/]

        lictool info GPL-3.0-only
    """
    state: AppState = ctx.obj
    try:
        template = build_resolver(state).lookup(license_id)
    except LictoolError as e:
        raise fail(e)

    lines = [
        f"[bold]Reference:[/] [underline]{template.reference_url}[/]",
        f"[bold]License ID:[/] {escape(template.identifier)}",
    ]
    if template.comments:
        lines.append(f"[bold]License Comments:[/] {escape(template.comments)}")
    if template.see_also:
        lines.append("[bold]See Also:[/]")
        lines.extend(f"  - [underline]{escape(link)}[/]" for link in template.see_also)
    lines.append(f"[bold]Is Supported License ID:[/] {_checkbox(not template.is_deprecated)}")
    lines.append(f"[bold]Is OSI Approved:[/] {_checkbox(template.is_osi_approved)}")
    if template.is_fsf_libre is not None:
        lines.append(f"[bold]Is FSF Free/Libre:[/] {_checkbox(template.is_fsf_libre)}")
    if template.deprecated_version:
        lines.append(f"[bold]Deprecated Version:[/] {escape(template.deprecated_version)}")
    used = scan_fields(template.body)
    lines.append(f"[bold]Fields:[/] {', '.join(used) if used else 'none'}")

    console.print(Panel(
        "\n".join(lines),
        title=f"[bold]{escape(template.display_name or template.identifier)}[/]",
        border_style="cyan",
    ))


# =============================================================================
# Add Command
# =============================================================================

def _parse_field_options(values: list[str] | None) -> dict[str, str]:
    fields: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{item}'", param_hint="--field")
        fields[key.strip()] = value
    return fields


@app.command()
def add(
    ctx: typer.Context,
    license_id: Annotated[str, typer.Argument(help="SPDX identifier, e.g. MIT")],
    author: Annotated[
        str | None,
        typer.Option("--author", "--owner", "-a", help="Copyright holder"),
    ] = None,
    email: Annotated[
        str | None,
        typer.Option("--email", "-e", help="Contact email"),
    ] = None,
    program: Annotated[
        str | None,
        typer.Option("--program", "--repo", "-r", help="Program name"),
    ] = None,
    year: Annotated[
        int | None,
        typer.Option("--year", "-y", help="Year of creation (default: current year)"),
    ] = None,
    field: Annotated[
        list[str] | None,
        typer.Option("--field", "-F", help="Extra placeholder value as KEY=VALUE"),
    ] = None,
    path: Annotated[
        Path,
        typer.Option("--path", "-p", help="File to write", dir_okay=False),
    ] = Path(DEFAULT_LICENSE_FILENAME),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing file"),
    ] = False,
) -> None:
    """
    Add a license file without prompting.

    Author and email default to the config file, then to git config; the
    year defaults to the current year.

    [bold]Examples:[/]

        lictool add MIT --author "Jane Doe"
        lictool add gpl-3.0-only -a "Jane Doe" -r "frobnicate" -p COPYING
    """
    state: AppState = ctx.obj
    fields = build_field_mapping(
        author=author,
        year=year,
        program=program,
        email=email,
        extra=_parse_field_options(field),
        suggestions=field_suggestions(state.settings.defaults),
    )

    try:
        rendered = build_resolver(state).resolve(license_id, fields)
        written = write_license(path, rendered, force=force)
    except MissingFieldsError as e:
        rprint(f"[red]Error:[/] {escape(str(e))}")
        hints = [FIELD_OPTIONS.get(name, f"--field {name}=...") for name in e.fields]
        rprint(f"[dim]Supply them with: {escape(' '.join(hints))}[/]")
        raise typer.Exit(1)
    except (LictoolError, OSError) as e:
        raise fail(e)

    rprint(f"[green]✔[/] [bold]Successfully created {escape(str(written))} file.[/]")


# =============================================================================
# Init Command (interactive)
# =============================================================================

def prompt_license(identifiers: list[str]) -> str:
    """
    Ask the user to pick an identifier, with autocompletion.

    Returns
    -------
    str
        The chosen identifier.
    """
    result = questionary.autocomplete(
        "Select a license:",
        choices=identifiers,
        validate=lambda v: v in identifiers or "Unknown license ID",
    ).ask()

    if result is None:
        raise typer.Abort()

    return result


def prompt_fields(template: LicenseTemplate, suggestions: dict[str, str]) -> dict[str, str]:
    """
    Prompt for every field the template uses.

    Required fields must be non-empty; an empty answer for an optional field
    leaves it unset.
    """
    fields: dict[str, str] = {}
    for name in scan_fields(template.body):
        required = name in REQUIRED_FIELDS
        answer = questionary.text(
            FIELD_PROMPTS.get(name, f"Please enter a value for '{name}':"),
            default=suggestions.get(name, ""),
            validate=(lambda v: bool(v.strip()) or "This field is required") if required else None,
        ).ask()

        if answer is None:
            raise typer.Abort()
        if answer.strip():
            fields[name] = answer.strip()
    return fields


@app.command()
def init(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Option("--path", "-p", help="File to write", dir_okay=False),
    ] = Path(DEFAULT_LICENSE_FILENAME),
) -> None:
    """
    Pick a license and fill it in interactively.

    [bold]Example:[/]

        lictool init --path LICENSE.md
    """
    state: AppState = ctx.obj
    resolver = build_resolver(state)
    try:
        licenses = filter_licenses(resolver.list(), supported=True)
        identifier = prompt_license([lic.identifier for lic in licenses])
        template = resolver.lookup(identifier)
        fields = prompt_fields(template, field_suggestions(state.settings.defaults))
        rendered = resolver.resolve(template.identifier, fields)
    except LictoolError as e:
        raise fail(e)

    while True:
        try:
            written = write_license(path, rendered)
            break
        except LicenseFileExistsError as e:
            rprint(f"[yellow]![/] [bold]{escape(str(e))}[/]")
            new_path = questionary.text(
                "Please specify a new file name to avoid overwriting:",
                default=str(path),
            ).ask()
            if new_path is None:
                raise typer.Abort()
            path = Path(new_path)
        except OSError as e:
            raise fail(e)

    rprint(f"[green]✔[/] [bold]Successfully created {escape(str(written))} file.[/]")


# =============================================================================
# Config Commands
# =============================================================================

@config_app.command("path")
def config_path(ctx: typer.Context) -> None:
    """Print the location of the config file."""
    state: AppState = ctx.obj
    console.print(str(state.config_path), highlight=False, soft_wrap=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective settings."""
    state: AppState = ctx.obj
    settings = state.settings

    table = Table(title="lictool Configuration", show_header=False)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")
    for key, value in settings.model_dump(mode="json", exclude={"defaults"}).items():
        table.add_row(key, escape(str(value)))
    for key, value in settings.defaults.items():
        table.add_row(f"defaults.{key}", escape(value))

    console.print(table)
    console.print(f"[dim]File: {escape(str(state.config_path))}[/]", soft_wrap=True)


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Setting name, or defaults.<field>")],
    value: Annotated[str, typer.Argument(help="New value")],
) -> None:
    """
    Set a value in the config file.

    [bold]Examples:[/]

        lictool config set timeout 5
        lictool config set defaults.author "Jane Doe"
    """
    state: AppState = ctx.obj
    try:
        set_setting(state.config_path, key, value)
    except (ConfigError, OSError) as e:
        raise fail(e)
    rprint(f"[green]✔[/] Set [cyan]{escape(key)}[/] = {escape(value)}")


# =============================================================================
# Cache Commands
# =============================================================================

@cache_app.command("path")
def cache_path(ctx: typer.Context) -> None:
    """Print the cache directory."""
    state: AppState = ctx.obj
    console.print(str(state.settings.cache_dir), highlight=False, soft_wrap=True)


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Delete all cached license data."""
    state: AppState = ctx.obj
    try:
        removed = FileCacheStore(state.settings.cache_dir).clear()
    except OSError as e:
        raise fail(e)
    rprint(f"[green]✔[/] Removed {removed} cached file(s).")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    app()
