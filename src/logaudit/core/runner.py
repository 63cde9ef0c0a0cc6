"""
Run coordinator.

The RunCoordinator drives one audit run from a frozen AuditRequest:
  - Validates the request and codec support
  - Takes the single-instance lock
  - Prepares the output directory and a private temp workspace
  - Streams discovered files through the Extractor into the aggregate
  - Publishes the gzip artifact and the summary report
  - Removes the workspace and sweeps expired artifacts

States::

    IDLE → VALIDATING → LOCK_ACQUIRED → DISCOVERING → EXTRACTING
         → COMPRESSING → SUMMARIZING → CLEANING_UP → RELEASED

Everything acquired after VALIDATING lives on one ExitStack, so the lock
and the workspace are released on success, on error and on SIGTERM/SIGHUP
(turned into SystemExit while a run is active) alike.
"""

from __future__ import annotations

import gzip
import logging
import os
import shutil
import signal
import tempfile
import threading
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from logaudit.core.codecs import CodecRegistry
from logaudit.core.config import AuditRequest
from logaudit.core.constants import (
    AGGREGATE_FILENAME,
    ARTIFACT_TEMPLATE,
    SUMMARY_TEMPLATE,
    TIMESTAMP_FORMAT,
    WORKSPACE_PREFIX,
)
from logaudit.core.discovery import discover
from logaudit.core.exceptions import (
    DependencyMissingError,
    FileSkipError,
    OutputPermissionError,
)
from logaudit.core.extractor import Extractor, Journal
from logaudit.core.filters import LineFilter
from logaudit.core.lock import RunLock
from logaudit.core.retention import sweep
from logaudit.core.summary import RunSummary

logger = logging.getLogger(__name__)

_TERMINATING_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None)) if sig
)


class RunState(StrEnum):
    IDLE = "idle"
    VALIDATING = "validating"
    LOCK_ACQUIRED = "lock_acquired"
    DISCOVERING = "discovering"
    EXTRACTING = "extracting"
    COMPRESSING = "compressing"
    SUMMARIZING = "summarizing"
    CLEANING_UP = "cleaning_up"
    RELEASED = "released"


@dataclass
class RunResult:
    summary: RunSummary
    summary_path: Path
    failures: list[FileSkipError] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    swept: list[Path] = field(default_factory=list)

    @property
    def artifact_path(self) -> Path:
        return self.summary.output_path


@contextmanager
def _exit_on_signal() -> Iterator[None]:
    """Turn SIGTERM/SIGHUP into SystemExit so ExitStack cleanup runs."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _raise(signum: int, frame: object) -> None:
        logger.warning("Received signal %d, aborting run", signum)
        raise SystemExit(128 + signum)

    previous = {sig: signal.signal(sig, _raise) for sig in _TERMINATING_SIGNALS}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class RunCoordinator:
    """
    One-shot orchestrator for a single audit run.

    Usage::

        result = RunCoordinator(request).run()
        print(result.artifact_path)
    """

    def __init__(
        self,
        request: AuditRequest,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.request = request
        self._clock = clock or _local_now
        self.state = RunState.IDLE

    def _enter(self, state: RunState) -> None:
        logger.debug("Run state %s -> %s", self.state, state)
        self.state = state

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> RunResult:
        """Execute the run. Raises on run-level failures; never on per-file ones."""
        self._enter(RunState.VALIDATING)
        line_filter = self._validate()
        stamp = self._clock().strftime(TIMESTAMP_FORMAT)
        req = self.request

        with ExitStack() as stack:
            stack.enter_context(_exit_on_signal())
            stack.callback(self._enter, RunState.RELEASED)
            stack.enter_context(RunLock(req.lock_path))
            self._enter(RunState.LOCK_ACQUIRED)

            self._prepare_output_dir()
            workspace = self._make_workspace(stamp)
            stack.callback(shutil.rmtree, workspace, ignore_errors=True)

            logger.info("Starting log audit")
            logger.info("Period: %s", req.date_range)
            if req.log_level:
                logger.info("Log level filter: %s", req.log_level)
            logger.info("Output directory: %s", req.output_dir)

            aggregate_path = workspace / AGGREGATE_FILENAME
            aggregate = stack.enter_context(
                open(aggregate_path, "w+", encoding="utf-8", errors="surrogateescape", newline="")
            )
            journal = Journal(workspace)
            extractor = Extractor(aggregate, line_filter, journal)
            total, processed, failures, skipped = self._extract_all(extractor, journal)

            self._enter(RunState.COMPRESSING)
            if extractor.lines_extracted == 0:
                logger.info("No logs found for the specified criteria")
                aggregate.write(f"No logs found for period {req.date_range}\n")
            aggregate.close()
            artifact = self._compress(aggregate_path, stamp)

            self._enter(RunState.SUMMARIZING)
            summary = RunSummary(
                timestamp=self._clock(),
                period=str(req.date_range),
                level_filter=req.log_level,
                total_files_found=total,
                files_processed=processed,
                files_failed=len(failures),
                output_path=artifact,
                output_size_bytes=artifact.stat().st_size,
                lines_extracted=extractor.lines_extracted,
            )
            summary_path = req.output_dir / SUMMARY_TEMPLATE.format(timestamp=stamp)
            try:
                summary.write(summary_path)
            except OSError as exc:
                raise OutputPermissionError(f"Cannot write summary {summary_path}: {exc}") from exc

            self._enter(RunState.CLEANING_UP)
            shutil.rmtree(workspace, ignore_errors=True)
            swept = sweep(req.output_dir, req.retention_days, keep=artifact)

        logger.info("Audit completed successfully")
        return RunResult(
            summary=summary,
            summary_path=summary_path,
            failures=failures,
            skipped=skipped,
            swept=swept,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _validate(self) -> LineFilter:
        gzip_codec = CodecRegistry.get("gzip")
        if not gzip_codec.available:
            raise DependencyMissingError(
                "Required codec 'gzip' not available: Python was built without zlib"
            )
        for name, codec in CodecRegistry.list_all().items():
            if not codec.available:
                logger.warning("Codec %s unavailable; %s files will be skipped", name, codec.suffix)
        return LineFilter(self.request.date_range, self.request.log_level)

    def _prepare_output_dir(self) -> None:
        out = self.request.output_dir
        try:
            out.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputPermissionError(f"Cannot create output directory {out}: {exc}") from exc
        if not os.access(out, os.W_OK | os.X_OK):
            raise OutputPermissionError(f"No write permission for output directory: {out}")

    def _make_workspace(self, stamp: str) -> Path:
        temp_dir = self.request.temp_dir
        try:
            return Path(
                tempfile.mkdtemp(
                    prefix=f"{WORKSPACE_PREFIX}{stamp}_",
                    dir=str(temp_dir) if temp_dir else None,
                )
            )
        except OSError as exc:
            where = temp_dir or tempfile.gettempdir()
            raise OutputPermissionError(f"Cannot create temp workspace in {where}: {exc}") from exc

    def _extract_all(
        self, extractor: Extractor, journal: Journal
    ) -> tuple[int, int, list[FileSkipError], list[Path]]:
        req = self.request
        total = 0
        processed = 0
        failures: list[FileSkipError] = []
        skipped: list[Path] = []

        self._enter(RunState.DISCOVERING)
        files = discover(req.log_dirs, req.log_patterns, dedupe=req.dedupe_paths)
        self._enter(RunState.EXTRACTING)
        for found in files:
            total += 1
            if found.skippable:
                journal.skipped(found.path, "unreadable or empty")
                skipped.append(found.path)
                logger.info("Skipping (unreadable or empty): %s", found.path)
                continue
            processed += 1
            try:
                extractor.extract(found)
            except FileSkipError as exc:
                journal.skipped(exc.path, exc.reason)
                failures.append(exc)
                logger.warning("Failed to extract %s: %s", exc.path, exc.reason)

        logger.info(
            "Files found: %d, processed: %d, failed: %d", total, processed, len(failures)
        )
        return total, processed, failures, skipped

    def _compress(self, aggregate_path: Path, stamp: str) -> Path:
        """Gzip the aggregate into the output directory under its final name atomically."""
        logger.info("Compressing output...")
        artifact = self.request.output_dir / ARTIFACT_TEMPLATE.format(timestamp=stamp)
        tmp_path = artifact.with_name(artifact.name + ".part")
        try:
            with open(aggregate_path, "rb") as src, gzip.open(tmp_path, "wb") as dst:
                shutil.copyfileobj(src, dst)
            tmp_path.replace(artifact)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise OutputPermissionError(f"Cannot write artifact {artifact}: {exc}") from exc
        return artifact
