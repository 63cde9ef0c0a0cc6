"""CLI commands: log-audit config show | init."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from logaudit.core.constants import ExitCode

console = Console()
err_console = Console(stderr=True)


@click.group("config")
def config_group() -> None:
    """View and initialise log-audit configuration."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
)
def config_show(as_json: bool, config_path: Path | None) -> None:
    """Display the effective configuration (file + environment + defaults)."""
    from logaudit.core.config import load_config
    from logaudit.core.exceptions import ConfigError

    try:
        cfg = load_config(config_path)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {escape(str(exc))}", soft_wrap=True)
        sys.exit(int(ExitCode.CONFIG_ERROR))

    data = cfg.model_dump(mode="json")
    data["_config_path"] = str(cfg.config_path) if cfg.config_path else "(defaults)"

    if as_json:
        click.echo(json.dumps(data, indent=2))
    else:
        _print_config_rich(data, console)


@config_group.command("init")
@click.option(
    "--path",
    "target",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write (default: $LOGAUDIT_CONFIG or /etc/log_audit.toml)",
)
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file")
def config_init(target: Path | None, force: bool) -> None:
    """Write a config file populated with the built-in defaults."""
    from logaudit.core.config import _config_file_path, default_config_data, save_config
    from logaudit.core.exceptions import ConfigError

    cfg_path = target or _config_file_path()
    if cfg_path.exists() and not force:
        err_console.print(
            f"[red]Config already exists:[/red] {escape(str(cfg_path))} (use --force)",
            soft_wrap=True,
        )
        sys.exit(int(ExitCode.CONFIG_ERROR))

    try:
        written = save_config(default_config_data(), cfg_path)
    except ConfigError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        sys.exit(int(ExitCode.PERMISSION_ERROR))
    console.print(f"[green]Config written:[/green] {escape(str(written))}", soft_wrap=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _print_config_rich(data: dict, console: Console) -> None:
    """Print config dict in a human-friendly format."""
    path = data.pop("_config_path", "unknown")
    console.print(f"[bold]log-audit configuration[/bold]  ({escape(path)})\n")

    for section, values in data.items():
        if isinstance(values, dict):
            console.print(f"  [cyan]\\[{section}][/cyan]")
            for k, v in values.items():
                console.print(f"    {k} = {escape(repr(v))}")
        else:
            console.print(f"  {section} = {escape(repr(values))}", soft_wrap=True)
    console.print()
