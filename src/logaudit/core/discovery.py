"""
Log file discovery.

Walks each root directory once per glob pattern and yields every regular
file whose basename matches. Order is directory order, then pattern order,
then a sorted ``os.walk`` traversal.

A file matched by two overlapping patterns (``syslog*`` and ``*.log.*`` both
match ``syslog.1.log.gz``) is yielded twice unless ``dedupe`` is set; the
duplicate is then counted and processed twice downstream.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredFile:
    path: Path
    size: int
    readable: bool

    @property
    def skippable(self) -> bool:
        """Empty or unreadable files are counted but never extracted."""
        return self.size == 0 or not self.readable

    @classmethod
    def from_path(cls, path: Path) -> DiscoveredFile:
        try:
            size = path.stat().st_size
        except OSError:
            size = 0
        return cls(path=path, size=size, readable=os.access(path, os.R_OK))


def _walk_matches(root: Path, pattern: str) -> Iterator[Path]:
    # Walk errors (permission denied on a subdirectory) are dropped silently.
    for dirpath, dirnames, filenames in os.walk(root, onerror=lambda exc: None):
        dirnames.sort()
        for name in sorted(filenames):
            if not fnmatchcase(name, pattern):
                continue
            path = Path(dirpath) / name
            if path.is_symlink() or not path.is_file():
                continue
            yield path


def discover(
    dirs: Iterable[Path | str],
    patterns: Iterable[str],
    dedupe: bool = False,
) -> Iterator[DiscoveredFile]:
    """Lazily yield candidate log files under ``dirs`` matching ``patterns``."""
    patterns = list(patterns)
    seen: set[Path] = set()
    for raw in dirs:
        root = Path(raw)
        if not root.is_dir():
            logger.debug("Log directory missing, skipping: %s", root)
            continue
        for pattern in patterns:
            for path in _walk_matches(root, pattern):
                if dedupe:
                    key = path.resolve()
                    if key in seen:
                        logger.debug("Duplicate match ignored: %s (%s)", path, pattern)
                        continue
                    seen.add(key)
                yield DiscoveredFile.from_path(path)
