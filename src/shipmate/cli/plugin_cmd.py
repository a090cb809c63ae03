"""CLI commands for plugin management."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from shipmate.config.loader import ConfigError, load_config
from shipmate.config.schema import PluginsConfig
from shipmate.plugins.directory import AuthorizedDirectoryClient, search
from shipmate.plugins.errors import PluginError
from shipmate.plugins.identifier import display_name
from shipmate.plugins.installer import create_installer
from shipmate.plugins.models import PAST_TENSE, BatchResult, Operation, PluginCommandOptions
from shipmate.plugins.package_manager import NpmPackageManager

console = Console()
err_console = Console(stderr=True)


def load_plugins_config(config_path: str | None = None) -> PluginsConfig:
    """Load the plugins section of the configuration, exiting on errors."""
    try:
        return load_config(config_path).plugins
    except ConfigError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from None


def list_plugins(config_path: str | None = None) -> None:
    """List plugins installed in the plugin directory."""
    config = load_plugins_config(config_path)
    try:
        installed = asyncio.run(_installed(config))
    except PluginError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    if not installed:
        console.print("No plugins installed!")
        return

    table = Table(title="Installed Plugins")
    table.add_column("Plugin", style="cyan")
    table.add_column("Version")
    for name, version in sorted(installed.items()):
        table.add_row(display_name(name, config.display_prefix), version)

    console.print(table)


async def _installed(config: PluginsConfig) -> dict[str, str]:
    package_manager = NpmPackageManager(
        executable=config.package_manager.executable,
        timeout=config.package_manager.timeout,
    )
    await package_manager.load(config.plugin_location, config.package_manager.options)
    return await package_manager.list_installed()


def search_plugins(pattern: str | None = None, config_path: str | None = None) -> None:
    """List authorized plugins whose names match a regular expression."""
    config = load_plugins_config(config_path)
    client = AuthorizedDirectoryClient(url=config.directory.url, timeout=config.directory.timeout)
    directory = asyncio.run(client.fetch())

    try:
        names = search(directory, pattern)
    except ValueError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    if not names:
        console.print("[dim]No matching plugins found.[/dim]")
        return

    table = Table(title="Authorized Plugins")
    table.add_column("Plugin", style="cyan")
    table.add_column("Description")
    for name in names:
        table.add_row(name, directory[name].description)

    console.print(table)


def run_plugin_batch(
    operation: Operation,
    plugins: list[str],
    version: str | None = None,
    config_path: str | None = None,
) -> BatchResult:
    """Install, update or uninstall plugins and print one line per plugin.

    Failures of single plugins are printed and do not change the exit
    code. Structural errors (constraint above the compatibility boundary,
    unusable plugin directory) exit with status 1.
    """
    config = load_plugins_config(config_path)
    options = PluginCommandOptions(plugin=plugins, version=version)

    action = "Uninstalling" if operation == "uninstall" else "Installing"
    console.print(f"{action} plugin(s): {escape(', '.join(plugins))}")

    try:
        result = asyncio.run(_run(config, operation, options))
    except PluginError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from None

    print_batch(result, config.display_prefix)
    return result


async def _run(
    config: PluginsConfig, operation: Operation, options: PluginCommandOptions
) -> BatchResult:
    installer = await create_installer(config)
    if operation == "install":
        return await installer.install(options)
    if operation == "update":
        return await installer.update(options)
    return await installer.uninstall(options)


def print_batch(result: BatchResult, prefix: str = "") -> None:
    """Print one success or failure line per plugin."""
    done = PAST_TENSE[result.operation]
    for outcome in result.outcomes:
        name = display_name(outcome.identifier.name, prefix)
        if outcome.success:
            if outcome.resolved is not None:
                source = display_name(outcome.resolved.canonical_source, prefix)
                target = f"{source}@{outcome.resolved.selected_version}"
            else:
                target = display_name(outcome.package or name, prefix)
            console.print(f"[green]{done} {escape(target)}[/green]")
        else:
            error = escape(outcome.error or "")
            err_console.print(f"[red]Failed to {result.operation} {escape(name)}: {error}[/red]")

    if result.failed:
        console.print(
            f"[yellow]{len(result.succeeded)} succeeded, {len(result.failed)} failed[/yellow]"
        )
