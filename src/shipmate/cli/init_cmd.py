"""Initialize command - write a default configuration file."""

from pathlib import Path

import typer
from rich.console import Console

from shipmate.config.loader import DEFAULT_CONFIG_PATH, save_config
from shipmate.config.schema import ShipmateConfig

console = Console()


def init_command(force: bool = False, config_path: str | None = None) -> None:
    """Write shipmate.yaml with default settings.

    Args:
        force: Overwrite existing config if present
        config_path: Destination, defaults to ~/.containership/shipmate.yaml
    """
    path = Path(config_path).expanduser() if config_path else DEFAULT_CONFIG_PATH

    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        console.print("Use [bold]--force[/bold] to overwrite.")
        raise typer.Exit(0)

    config = ShipmateConfig()
    save_config(config, path)

    console.print(f"[green]Wrote configuration to {path}[/green]")
    console.print(f"  Plugin location: {config.plugins.plugin_location}")
    console.print(f"  Compatibility policy: {config.plugins.compatibility.policy}")
