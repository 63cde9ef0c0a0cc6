"""
Single-instance run lock.

The lock is a marker file at a well-known path holding the owner's PID. It
is created with ``O_CREAT | O_EXCL`` so two processes racing for it cannot
both win. A run that finds the marker already present aborts immediately;
there is no retry and no automatic stale-lock takeover.

Usage::

    with RunLock(path):
        ...  # marker exists for exactly this block

Stale markers (owner PID gone, e.g. after SIGKILL) are reported and
optionally removed by ``check_stale_lock``, which backs ``log-audit doctor``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import TracebackType

from logaudit.core.exceptions import AlreadyRunningError, OutputPermissionError

logger = logging.getLogger(__name__)


def _pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Process exists but belongs to someone else.
        return True
    return True


def _read_pid(path: Path) -> int | None:
    try:
        return int(path.read_text().strip())
    except (OSError, ValueError):
        return None


class RunLock:
    """Filesystem lock marker owned by the current process while held."""

    def __init__(self, lock_path: Path | str) -> None:
        self.lock_path = Path(lock_path)
        self.acquired = False

    @property
    def holder_pid(self) -> int | None:
        """PID recorded in the marker, or None if there is no readable marker."""
        return _read_pid(self.lock_path)

    def acquire(self) -> None:
        """
        Create the marker or raise AlreadyRunningError if it exists.

        Any other failure to create it (missing or read-only directory) raises
        OutputPermissionError.
        """
        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as exc:
            holder = self.holder_pid
            owner = f" (pid {holder})" if holder else ""
            raise AlreadyRunningError(
                f"log-audit is already running{owner}. Lock file exists: {self.lock_path}"
            ) from exc
        except OSError as exc:
            raise OutputPermissionError(f"Cannot create lock file {self.lock_path}: {exc}") from exc
        with os.fdopen(fd, "w") as fh:
            fh.write(f"{os.getpid()}\n")
        self.acquired = True
        logger.debug("Lock acquired: %s", self.lock_path)

    def release(self) -> None:
        """Remove the marker if this instance created it. Safe to call twice."""
        if not self.acquired:
            return
        self.acquired = False
        try:
            self.lock_path.unlink()
        except FileNotFoundError:
            logger.warning("Lock file vanished before release: %s", self.lock_path)
        else:
            logger.debug("Lock released: %s", self.lock_path)

    def __enter__(self) -> RunLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


def check_stale_lock(lock_path: Path | str, fix: bool = False) -> dict[str, str]:
    """
    Inspect the lock marker for ``log-audit doctor``.

    Returns a check dict ``{"name", "status", "detail"}`` where status is
    ``pass`` (no lock, or held by a live process) or ``warn`` (stale). With
    ``fix=True`` a stale marker is deleted.
    """
    path = Path(lock_path)
    name = "Run lock"
    if not path.exists():
        return {"name": name, "status": "pass", "detail": f"no lock file at {path}"}

    pid = _read_pid(path)
    if pid is not None and _pid_alive(pid):
        return {"name": name, "status": "pass", "detail": f"held by running pid {pid}"}

    owner = f"pid {pid}" if pid is not None else "unreadable pid"
    if not fix:
        return {
            "name": name,
            "status": "warn",
            "detail": f"stale lock ({owner}) at {path}; run with --fix to remove",
        }
    try:
        path.unlink()
    except OSError as exc:
        return {"name": name, "status": "fail", "detail": f"cannot remove stale lock: {exc}"}
    return {"name": name, "status": "warn", "detail": f"stale lock ({owner}) removed"}
