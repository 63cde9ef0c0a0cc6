"""log-audit doctor: environment and configuration health check."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from logaudit.core.constants import ExitCode


def _check(name: str, status: str, detail: str) -> dict[str, str]:
    return {"name": name, "status": status, "detail": detail}


def _codec_checks() -> list[dict[str, str]]:
    from logaudit.core.codecs import CodecRegistry

    checks = []
    for name, codec in CodecRegistry.list_all().items():
        if codec.available:
            checks.append(_check(f"Codec {name}", "pass", "available"))
        elif name == "gzip":
            checks.append(_check(f"Codec {name}", "fail", "required for output; zlib missing"))
        else:
            checks.append(_check(f"Codec {name}", "warn", f"{codec.suffix} files will be skipped"))
    return checks


def _output_dir_check(output_dir: Path) -> dict[str, str]:
    name = "Output directory"
    if output_dir.is_dir():
        if os.access(output_dir, os.W_OK | os.X_OK):
            return _check(name, "pass", f"{output_dir} is writable")
        return _check(name, "fail", f"no write permission: {output_dir}")
    parent = next((p for p in output_dir.parents if p.exists()), None)
    if parent is not None and os.access(parent, os.W_OK | os.X_OK):
        return _check(name, "pass", f"{output_dir} will be created")
    return _check(name, "fail", f"cannot create {output_dir}")


def _log_dirs_check(log_dirs: list[str]) -> dict[str, str]:
    present = [d for d in log_dirs if Path(d).is_dir()]
    if not present:
        return _check("Log directories", "warn", "none of the configured directories exist")
    return _check("Log directories", "pass", f"{len(present)}/{len(log_dirs)} present")


def cmd_doctor(fix: bool, as_json: bool, config_path: Path | None, console: Console) -> None:
    from logaudit.core.config import load_config
    from logaudit.core.exceptions import ConfigError
    from logaudit.core.lock import check_stale_lock

    checks = [
        _check("Python version", "pass", sys.version.split()[0]),
        _check("Platform", "pass", sys.platform),
    ]
    checks.extend(_codec_checks())

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        checks.append(_check("Config", "fail", str(exc)))
        config = None
    else:
        source = str(config.config_path) if config.config_path else "built-in defaults"
        checks.append(_check("Config", "pass", source))

    if config is not None:
        checks.append(_output_dir_check(Path(config.output_dir)))
        checks.append(_log_dirs_check(config.log_dirs))
        checks.append(check_stale_lock(config.lock_path, fix=fix))

    all_pass = all(c["status"] != "fail" for c in checks)

    if as_json:
        print(json.dumps({"checks": checks, "all_pass": all_pass}, indent=2))
    else:
        icons = {
            "pass": "[green]PASS[/green]",
            "warn": "[yellow]WARN[/yellow]",
            "fail": "[red]FAIL[/red]",
        }
        console.print("[bold]log-audit doctor[/bold]\n")
        for c in checks:
            console.print(f"  {icons[c['status']]}  {c['name']}: {escape(c['detail'])}", soft_wrap=True)
        console.print()
        if all_pass:
            console.print("[green]All checks passed.[/green]")
        else:
            console.print("[red]Some checks failed.[/red]")

    if not all_pass:
        sys.exit(int(ExitCode.ERROR))
