"""Main CLI application using Typer."""

import logging
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from shipmate import __version__

app = typer.Typer(
    name="shipmate",
    help="Shipmate - plugin manager for containership hosts",
    no_args_is_help=True,
)

console = Console()

_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config file (default: ~/.containership/shipmate.yaml)",
)


@app.callback()
def configure_logging(
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
):
    """Set up logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def version():
    """Show shipmate version."""
    console.print(f"shipmate version {__version__}")


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
    config_path: str = _CONFIG_OPTION,
):
    """Write a default configuration file."""
    from shipmate.cli.init_cmd import init_command

    init_command(force=force, config_path=config_path)


# Plugin commands
plugin_app = typer.Typer(help="Manage containership plugins")
app.add_typer(plugin_app, name="plugin")


@plugin_app.command("list")
def plugin_list(config_path: str = _CONFIG_OPTION):
    """List installed plugins."""
    from shipmate.cli.plugin_cmd import list_plugins

    list_plugins(config_path=config_path)


@plugin_app.command("search")
def plugin_search(
    pattern: Optional[str] = typer.Argument(None, help="Regular expression to match names"),
    config_path: str = _CONFIG_OPTION,
):
    """Search the authorized plugin directory."""
    from shipmate.cli.plugin_cmd import search_plugins

    search_plugins(pattern=pattern, config_path=config_path)


@plugin_app.command("add")
def plugin_add(
    plugins: List[str] = typer.Argument(..., help="Plugins to add, as NAME or NAME@VERSION"),
    version: Optional[str] = typer.Option(
        None, "--version", help="Version constraint for plugins given without one"
    ),
    config_path: str = _CONFIG_OPTION,
):
    """Install plugins."""
    from shipmate.cli.plugin_cmd import run_plugin_batch

    run_plugin_batch("install", plugins, version=version, config_path=config_path)


@plugin_app.command("update")
def plugin_update(
    plugins: List[str] = typer.Argument(..., help="Plugins to update, as NAME or NAME@VERSION"),
    version: Optional[str] = typer.Option(
        None, "--version", help="Version constraint for plugins given without one"
    ),
    config_path: str = _CONFIG_OPTION,
):
    """Update plugins to their newest compatible version."""
    from shipmate.cli.plugin_cmd import run_plugin_batch

    run_plugin_batch("update", plugins, version=version, config_path=config_path)


@plugin_app.command("remove")
def plugin_remove(
    plugins: List[str] = typer.Argument(..., help="Plugins to remove"),
    config_path: str = _CONFIG_OPTION,
):
    """Uninstall plugins."""
    from shipmate.cli.plugin_cmd import run_plugin_batch

    run_plugin_batch("uninstall", plugins, config_path=config_path)


def main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
