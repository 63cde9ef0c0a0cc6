"""
log-audit CLI entry point.

Commands:
  log-audit run [options]     — extract, compress and summarise one period
  log-audit doctor [--fix]    — environment and configuration health check
  log-audit config show       — print the effective configuration
  log-audit config init       — write a default config file
  log-audit version           — show version and codec support
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from logaudit import __version__
from logaudit.cli._config_cmd import config_group

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="log-audit %(version)s")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """log-audit: extract and archive log lines for a date range."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


cli.add_command(config_group)


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--start-date", "-s", default=None, metavar="DATE", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", "-e", default=None, metavar="DATE", help="End date (YYYY-MM-DD)")
@click.option("--output-dir", "-o", default=None, metavar="DIR", help="Output directory")
@click.option("--log-level", "-l", default=None, metavar="LEVEL", help="Log level to filter")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $LOGAUDIT_CONFIG or /etc/log_audit.toml)",
)
@click.option(
    "--retention-days",
    type=click.IntRange(min=0),
    default=None,
    help="Delete artifacts older than this many days",
)
@click.option(
    "--dedupe/--no-dedupe",
    default=None,
    help="Process a file matched by several patterns only once",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the summary as JSON")
@click.pass_context
def run(
    ctx: click.Context,
    start_date: str | None,
    end_date: str | None,
    output_dir: str | None,
    log_level: str | None,
    config_path: Path | None,
    retention_days: int | None,
    dedupe: bool | None,
    as_json: bool,
) -> None:
    """Extract log lines for a date range into a compressed artifact."""
    from logaudit.cli._run import cmd_run

    cmd_run(
        start_date=start_date,
        end_date=end_date,
        output_dir=output_dir,
        log_level=log_level,
        config_path=config_path,
        retention_days=retention_days,
        dedupe=dedupe,
        as_json=as_json,
        verbose=ctx.obj.get("verbose", False),
        console=console,
        err_console=err_console,
    )


# ---------------------------------------------------------------------------
# doctor
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--fix", is_flag=True, default=False, help="Remove a stale lock file")
@click.option("--json", "as_json", is_flag=True, default=False)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
)
def doctor(fix: bool, as_json: bool, config_path: Path | None) -> None:
    """Environment and configuration health check."""
    from logaudit.cli._doctor import cmd_doctor

    cmd_doctor(fix=fix, as_json=as_json, config_path=config_path, console=console)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
def version(as_json: bool) -> None:
    """Show version information and codec support."""
    import platform
    import sys as _sys

    from logaudit.core.codecs import CodecRegistry

    codecs = {name: codec.available for name, codec in CodecRegistry.list_all().items()}

    if as_json:
        import json

        click.echo(
            json.dumps(
                {
                    "log-audit": __version__,
                    "python": _sys.version.split()[0],
                    "platform": _sys.platform,
                    "arch": platform.machine(),
                    "codecs": codecs,
                },
                indent=2,
            )
        )
    else:
        console.print(f"log-audit {__version__}")
        console.print(f"Python {_sys.version.split()[0]}")
        console.print(f"Platform: {_sys.platform} {platform.machine()}")
        console.print("\nCodecs:")
        for name, available in codecs.items():
            status = "[green]available[/green]" if available else "[red]missing[/red]"
            console.print(f"  {name:<8} {status}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
