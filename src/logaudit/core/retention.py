"""Retention sweep: delete prior audit artifacts older than the threshold."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from logaudit.core.constants import ARTIFACT_GLOB, SECONDS_PER_DAY

logger = logging.getLogger(__name__)


def sweep(
    output_dir: Path,
    retention_days: int,
    now: float | None = None,
    keep: Path | None = None,
) -> list[Path]:
    """
    Delete ``audit_*.log.gz`` files in ``output_dir`` older than ``retention_days``.

    Age is measured from the file's modification time to ``now`` (epoch
    seconds, defaults to the current time). Only the top level of
    ``output_dir`` is scanned. ``keep`` (the artifact of the current run) is
    never deleted, whatever its age. Returns the paths that were deleted.
    """
    logger.info("Cleaning up files older than %d days in %s", retention_days, output_dir)
    if not output_dir.is_dir():
        return []

    cutoff = (time.time() if now is None else now) - retention_days * SECONDS_PER_DAY
    removed: list[Path] = []
    for path in sorted(output_dir.glob(ARTIFACT_GLOB)):
        try:
            if path == keep or not path.is_file() or path.stat().st_mtime >= cutoff:
                continue
            path.unlink()
        except OSError as exc:
            logger.warning("Failed to delete %s: %s", path, exc)
            continue
        logger.debug("Deleted expired artifact %s", path)
        removed.append(path)
    return removed
