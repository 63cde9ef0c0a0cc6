"""
Per-file extraction into the run aggregate.

The Extractor owns nothing: the aggregate stream and the journal belong to
the RunCoordinator's workspace. For every file it is handed, it:

  1. records the path in the processing journal
  2. opens the file through its codec as a text line stream
  3. appends every line accepted by the LineFilter to the aggregate

A file that fails part-way (corrupt archive, truncated stream, I/O error)
contributes no lines at all: the aggregate is truncated back to where it
stood before the file, and FileSkipError is raised for the caller to record.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO

from logaudit.core.codecs import codec_for
from logaudit.core.constants import PROCESSING_JOURNAL, SKIPPED_JOURNAL
from logaudit.core.discovery import DiscoveredFile
from logaudit.core.exceptions import FileSkipError
from logaudit.core.filters import LineFilter

logger = logging.getLogger(__name__)


class Journal:
    """Append-only path journal kept in the run workspace (paths only, no content)."""

    def __init__(self, workspace: Path) -> None:
        self.processing_path = workspace / PROCESSING_JOURNAL
        self.skipped_path = workspace / SKIPPED_JOURNAL

    def processing(self, path: Path) -> None:
        self._append(self.processing_path, f"Processing: {path}")

    def skipped(self, path: Path, reason: str) -> None:
        self._append(self.skipped_path, f"Skipping ({reason}): {path}")

    @staticmethod
    def _append(target: Path, line: str) -> None:
        with target.open("a", encoding="utf-8", errors="surrogateescape") as fh:
            fh.write(line + "\n")


class Extractor:
    """Append matching lines from each file to a single aggregate stream."""

    def __init__(self, aggregate: IO[str], line_filter: LineFilter, journal: Journal) -> None:
        self._out = aggregate
        self._filter = line_filter
        self._journal = journal
        self.lines_extracted = 0

    def extract(self, file: DiscoveredFile) -> int:
        """Extract matching lines from ``file``; returns the number appended."""
        path = file.path
        self._journal.processing(path)
        codec = codec_for(path)
        if not codec.available:
            raise FileSkipError(path, f"{codec.name} support is not available")

        errors = codec.decode_errors()
        mark = self._out.tell()
        count = 0
        try:
            with codec.open_lines(path) as fh:
                for line in fh:
                    if not self._filter.include(line):
                        continue
                    self._out.write(line if line.endswith("\n") else line + "\n")
                    count += 1
        except errors as exc:
            self._out.seek(mark)
            self._out.truncate()
            raise FileSkipError(path, f"{codec.name} read failed: {exc}") from exc

        logger.debug("Extracted %d line(s) from %s (%s)", count, path, codec.name)
        self.lines_extracted += count
        return count
