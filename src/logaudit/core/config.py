"""log-audit configuration: Pydantic models, TOML load/save, and request building."""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from logaudit.core.constants import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_END_DATE,
    DEFAULT_LOCK_PATH,
    DEFAULT_LOG_DIRS,
    DEFAULT_LOG_PATTERNS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RETENTION_DAYS,
    DEFAULT_START_DATE,
)
from logaudit.core.dates import DateRange, parse_date
from logaudit.core.exceptions import ConfigError, ConfigNotFoundError

# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v.lower()


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class AuditConfig(BaseModel):
    """Settings read from the config file; the defaults for every run."""

    log_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_LOG_DIRS))
    log_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LOG_PATTERNS), min_length=1
    )
    start_date: str = DEFAULT_START_DATE
    end_date: str = DEFAULT_END_DATE
    output_dir: str = DEFAULT_OUTPUT_DIR
    retention_days: int = Field(default=DEFAULT_RETENTION_DAYS, ge=0)
    lock_path: str = DEFAULT_LOCK_PATH
    temp_dir: str = ""  # empty → system temp directory
    dedupe_paths: bool = False
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    _config_path: Path | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def accept_toml_dates(cls, v: Any) -> Any:
        """TOML has a native date type; keep the ISO string form."""
        if isinstance(v, date):
            return v.isoformat()
        return v

    @field_validator("log_dirs", "log_patterns", mode="before")
    @classmethod
    def accept_single_string(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def config_path(self) -> Path | None:
        return self._config_path


class AuditRequest(BaseModel):
    """Immutable parameters of one audit run, after all overrides."""

    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date
    log_level: str | None = None
    log_dirs: tuple[Path, ...]
    log_patterns: tuple[str, ...]
    output_dir: Path
    retention_days: int = Field(ge=0)
    lock_path: Path
    temp_dir: Path | None = None
    dedupe_paths: bool = False

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("LOGAUDIT_CONFIG"):
        return Path(env_path)
    return Path(DEFAULT_CONFIG_PATH)


def load_config(path: Path | None = None) -> AuditConfig:
    """
    Load AuditConfig from a TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (LOGAUDIT_*)
      2. Config file (/etc/log_audit.toml, or $LOGAUDIT_CONFIG)
      3. Built-in defaults

    The default config file is optional. A path given explicitly (argument
    or LOGAUDIT_CONFIG) must exist.
    """
    import tomllib

    explicit = path is not None or "LOGAUDIT_CONFIG" in os.environ
    cfg_path = path or _config_file_path()

    data: dict[str, Any] = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc
    elif explicit:
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")

    data = _normalise_keys(data)
    _apply_env_overrides(data)

    try:
        config = AuditConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {_describe(exc)}") from exc

    config._config_path = cfg_path if cfg_path.exists() else None
    return config


def _describe(exc: ValidationError) -> str:
    """Collapse a pydantic ValidationError into one line."""
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
        for err in exc.errors()
    )


def _normalise_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Lower-case keys so shell-style LOG_DIRS and log_dirs are equivalent."""
    out: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = _normalise_keys(value)
        out[key.lower()] = value
    return out


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay LOGAUDIT_* environment variables onto the parsed TOML data."""
    if output_dir := os.environ.get("LOGAUDIT_OUTPUT_DIR"):
        data["output_dir"] = output_dir
    if retention := os.environ.get("LOGAUDIT_RETENTION_DAYS"):
        data["retention_days"] = retention
    if lock_path := os.environ.get("LOGAUDIT_LOCK_PATH"):
        data["lock_path"] = lock_path
    if level := os.environ.get("LOGAUDIT_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("LOGAUDIT_LOG_FORMAT"):
        data.setdefault("logging", {})["format"] = fmt


def default_config_data() -> dict[str, Any]:
    """The built-in defaults as a TOML-serialisable dict."""
    return AuditConfig().model_dump(mode="json")


def save_config(config_data: dict[str, Any], path: Path | None = None) -> Path:
    """Write config dict to a TOML file atomically."""
    import tomli_w

    cfg_path = path or _config_file_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        with open(tmp_path, "wb") as f:
            tomli_w.dump(config_data, f)
        tmp_path.rename(cfg_path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    cfg_path.chmod(0o644)
    return cfg_path


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


def build_request(
    config: AuditConfig,
    *,
    start_date: str | None = None,
    end_date: str | None = None,
    output_dir: str | None = None,
    log_level: str | None = None,
    retention_days: int | None = None,
    dedupe_paths: bool | None = None,
) -> AuditRequest:
    """
    Merge command-line overrides onto ``config`` and freeze the result.

    Raises InvalidDateError for malformed dates and DateRangeError when the
    start date falls after the end date.
    """
    date_range = DateRange(
        parse_date(start_date or config.start_date),
        parse_date(end_date or config.end_date),
    )
    try:
        return AuditRequest(
            start_date=date_range.start,
            end_date=date_range.end,
            log_level=log_level or None,
            log_dirs=tuple(Path(d) for d in config.log_dirs),
            log_patterns=tuple(config.log_patterns),
            output_dir=Path(output_dir or config.output_dir),
            retention_days=config.retention_days if retention_days is None else retention_days,
            lock_path=Path(config.lock_path),
            temp_dir=Path(config.temp_dir) if config.temp_dir else None,
            dedupe_paths=config.dedupe_paths if dedupe_paths is None else dedupe_paths,
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid audit request: {_describe(exc)}") from exc
