"""log-audit run: one extraction run from config + command-line overrides."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape

from logaudit.core.constants import ExitCode
from logaudit.core.exceptions import (
    AlreadyRunningError,
    ConfigError,
    DependencyMissingError,
    LogAuditError,
    OutputPermissionError,
)


def _fail(err_console: Console, message: str, code: ExitCode) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    sys.exit(int(code))


def cmd_run(
    start_date: str | None,
    end_date: str | None,
    output_dir: str | None,
    log_level: str | None,
    config_path: Path | None,
    retention_days: int | None,
    dedupe: bool | None,
    as_json: bool,
    verbose: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Load config, build the request and run the audit; exit non-zero on failure."""
    from logaudit.core.config import build_request, load_config
    from logaudit.core.logging_setup import configure_logging
    from logaudit.core.runner import RunCoordinator

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        _fail(err_console, f"Config error: {exc}", ExitCode.CONFIG_ERROR)

    configure_logging("DEBUG" if verbose else config.logging.level, config.logging.format)

    try:
        request = build_request(
            config,
            start_date=start_date,
            end_date=end_date,
            output_dir=output_dir,
            log_level=log_level,
            retention_days=retention_days,
            dedupe_paths=dedupe,
        )
        result = RunCoordinator(request).run()
    except DependencyMissingError as exc:
        _fail(err_console, str(exc), ExitCode.DEPENDENCY_MISSING)
    except ConfigError as exc:
        _fail(err_console, str(exc), ExitCode.CONFIG_ERROR)
    except AlreadyRunningError as exc:
        _fail(err_console, str(exc), ExitCode.ALREADY_RUNNING)
    except OutputPermissionError as exc:
        _fail(err_console, str(exc), ExitCode.PERMISSION_ERROR)
    except LogAuditError as exc:
        _fail(err_console, str(exc), ExitCode.ERROR)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(130)

    if as_json:
        data = result.summary.to_dict()
        data["summary_path"] = str(result.summary_path)
        data["failed_files"] = [str(f.path) for f in result.failures]
        data["swept"] = [str(p) for p in result.swept]
        click.echo(json.dumps(data, indent=2))
        return

    summary = result.summary
    console.print("[green]Audit completed successfully[/green]")
    console.print(f"Output: {escape(str(result.artifact_path))}", soft_wrap=True)
    console.print(f"Summary: {escape(str(result.summary_path))}", soft_wrap=True)
    console.print(
        f"Files: {summary.files_processed} processed of {summary.total_files_found} found, "
        f"lines extracted: {summary.lines_extracted}"
    )
    if result.failures:
        console.print(
            f"[yellow]{len(result.failures)} file(s) could not be read and were skipped[/yellow]"
        )
