"""CLI commands: sampro config init | show | validate."""

from __future__ import annotations

import json

import click
from rich.console import Console

from sampro.cli._common import reported_errors

console = Console()


@click.group("config")
def config_group() -> None:
    """Create, view, and validate the SAM Pro configuration file."""


@config_group.command("init")
@click.option("--data-dir", default="", help="Where app-data.json lives (default: ~/.sampro)")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.option("--log-format", type=click.Choice(["text", "json"]), default="text", show_default=True)
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing config file")
def config_init(data_dir: str, log_level: str, log_format: str, force: bool) -> None:
    """Write a config file with the given settings."""
    from sampro.core.config import SamProConfig, _config_file_path, save_config
    from sampro.core.exceptions import ConfigError

    with reported_errors():
        cfg_path = _config_file_path()
        if cfg_path.exists() and not force:
            raise ConfigError(f"Config already exists at {cfg_path}. Use --force to overwrite.")
        try:
            cfg = SamProConfig.model_validate(
                {
                    "storage": {"data_dir": data_dir},
                    "logging": {"level": log_level, "format": log_format},
                }
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid settings: {exc}") from exc
        path = save_config(cfg.model_dump(), cfg_path)
        console.print(f"[green]Config written:[/green] {path}")


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def config_show(as_json: bool) -> None:
    """Display the configuration file, with environment overrides applied."""
    from sampro.core.config import _config_file_path, load_config
    from sampro.core.exceptions import ConfigNotFoundError

    with reported_errors():
        cfg_path = _config_file_path()
        if not cfg_path.exists():
            raise ConfigNotFoundError(f"Config not found: {cfg_path}. Run: sampro config init")
        cfg = load_config(cfg_path)

        data = cfg.model_dump()
        data["_config_path"] = str(cfg_path)
        data["_data_dir"] = str(cfg.data_dir)

        if as_json:
            click.echo(json.dumps(data, indent=2))
            return

        console.print(f"[bold]SAM Pro configuration[/bold]  ({data.pop('_config_path')})\n")
        console.print(f"  data directory = {data.pop('_data_dir')}")
        for section, values in data.items():
            console.print(f"  [cyan]\\[{section}][/cyan]")
            for k, v in values.items():
                console.print(f"    {k} = {v!r}")


@config_group.command("validate")
def config_validate() -> None:
    """Check the config file against the schema."""
    from sampro.core.config import _config_file_path, load_config
    from sampro.core.exceptions import ConfigNotFoundError

    with reported_errors():
        cfg_path = _config_file_path()
        if not cfg_path.exists():
            raise ConfigNotFoundError(f"Config not found: {cfg_path}")
        load_config(cfg_path)
        console.print(f"[green]Config is valid:[/green] {cfg_path}")
