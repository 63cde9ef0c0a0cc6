"""Unit tests for logaudit.core.extractor: per-file extraction and the journal."""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import IO

import pytest

from logaudit.core.dates import DateRange
from logaudit.core.discovery import DiscoveredFile
from logaudit.core.exceptions import FileSkipError
from logaudit.core.extractor import Extractor, Journal
from logaudit.core.filters import LineFilter

_DAYS = "".join(f"2023-01-0{d} 10:00:00 host app: day {d}\n" for d in range(1, 6))


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    ws = tmp_path / "ws"
    ws.mkdir()
    return ws


@pytest.fixture
def aggregate(workspace: Path) -> IO[str]:
    fh = open(workspace / "extracted.log", "w+", encoding="utf-8", errors="surrogateescape", newline="")
    yield fh
    fh.close()


def _extractor(aggregate: IO[str], workspace: Path, level: str | None = None) -> Extractor:
    line_filter = LineFilter(DateRange.from_strings("2023-01-02", "2023-01-04"), level)
    return Extractor(aggregate, line_filter, Journal(workspace))


def _contents(aggregate: IO[str]) -> str:
    aggregate.flush()
    aggregate.seek(0)
    return aggregate.read()


class TestExtractor:
    def test_plain_file(self, tmp_path: Path, workspace: Path, aggregate: IO[str]) -> None:
        log = tmp_path / "app.log"
        log.write_text(_DAYS)
        ex = _extractor(aggregate, workspace)
        assert ex.extract(DiscoveredFile.from_path(log)) == 3
        assert _contents(aggregate).splitlines() == [
            "2023-01-02 10:00:00 host app: day 2",
            "2023-01-03 10:00:00 host app: day 3",
            "2023-01-04 10:00:00 host app: day 4",
        ]

    def test_carriage_returns_kept_verbatim(
        self, tmp_path: Path, workspace: Path, aggregate: IO[str]
    ) -> None:
        log = tmp_path / "app.log"
        log.write_bytes(b"2023-01-02 part1\rpart2\n2023-01-03 crlf\r\n2023-01-09 late\r\n")
        ex = _extractor(aggregate, workspace)
        assert ex.extract(DiscoveredFile.from_path(log)) == 2
        assert _contents(aggregate) == "2023-01-02 part1\rpart2\n2023-01-03 crlf\r\n"

    def test_carriage_returns_kept_in_gzip(
        self, tmp_path: Path, workspace: Path, aggregate: IO[str]
    ) -> None:
        log = tmp_path / "app.log.1.gz"
        log.write_bytes(gzip.compress(b"2023-01-02 a\rb\n2023-01-03 c\r\n"))
        ex = _extractor(aggregate, workspace)
        assert ex.extract(DiscoveredFile.from_path(log)) == 2
        assert _contents(aggregate) == "2023-01-02 a\rb\n2023-01-03 c\r\n"

    def test_gzip_file(self, tmp_path: Path, workspace: Path, aggregate: IO[str]) -> None:
        log = tmp_path / "app.log.1.gz"
        log.write_bytes(gzip.compress(_DAYS.encode()))
        ex = _extractor(aggregate, workspace)
        assert ex.extract(DiscoveredFile.from_path(log)) == 3

    def test_counts_accumulate_across_files(
        self, tmp_path: Path, workspace: Path, aggregate: IO[str]
    ) -> None:
        a = tmp_path / "a.log"
        b = tmp_path / "b.log"
        a.write_text(_DAYS)
        b.write_text(_DAYS)
        ex = _extractor(aggregate, workspace)
        ex.extract(DiscoveredFile.from_path(a))
        ex.extract(DiscoveredFile.from_path(b))
        assert ex.lines_extracted == 6

    def test_level_filter(self, tmp_path: Path, workspace: Path, aggregate: IO[str]) -> None:
        log = tmp_path / "app.log"
        log.write_text(
            "2023-01-02 INFO started\n"
            "2023-01-03 ERROR disk full\n"
            "2023-01-03 WARN slow\n"
            "2023-01-09 ERROR out of range\n"
        )
        ex = _extractor(aggregate, workspace, level="ERROR")
        assert ex.extract(DiscoveredFile.from_path(log)) == 1
        assert _contents(aggregate) == "2023-01-03 ERROR disk full\n"

    def test_missing_final_newline_added(
        self, tmp_path: Path, workspace: Path, aggregate: IO[str]
    ) -> None:
        a = tmp_path / "a.log"
        b = tmp_path / "b.log"
        a.write_text("2023-01-02 no newline")
        b.write_text("2023-01-03 next\n")
        ex = _extractor(aggregate, workspace)
        ex.extract(DiscoveredFile.from_path(a))
        ex.extract(DiscoveredFile.from_path(b))
        assert _contents(aggregate) == "2023-01-02 no newline\n2023-01-03 next\n"

    def test_corrupt_archive_contributes_nothing(
        self, tmp_path: Path, workspace: Path, aggregate: IO[str]
    ) -> None:
        good = tmp_path / "good.log"
        good.write_text("2023-01-02 kept\n")
        # Valid gzip header and leading lines, then garbage: partial output must be rolled back.
        payload = gzip.compress(("2023-01-03 partial\n" * 5000).encode())
        bad = tmp_path / "bad.log.gz"
        bad.write_bytes(payload[: len(payload) // 2] + b"\x00garbage")

        ex = _extractor(aggregate, workspace)
        ex.extract(DiscoveredFile.from_path(good))
        with pytest.raises(FileSkipError) as excinfo:
            ex.extract(DiscoveredFile.from_path(bad))

        assert excinfo.value.path == bad
        assert _contents(aggregate) == "2023-01-02 kept\n"
        assert ex.lines_extracted == 1

    def test_not_gzip_at_all(self, tmp_path: Path, workspace: Path, aggregate: IO[str]) -> None:
        bad = tmp_path / "fake.log.gz"
        bad.write_text("2023-01-02 plain text pretending\n")
        ex = _extractor(aggregate, workspace)
        with pytest.raises(FileSkipError):
            ex.extract(DiscoveredFile.from_path(bad))
        assert _contents(aggregate) == ""

    def test_unavailable_codec_fails_only_that_file(
        self,
        tmp_path: Path,
        workspace: Path,
        aggregate: IO[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        from logaudit.core.codecs import XzCodec

        monkeypatch.setattr(XzCodec, "requires", "_no_such_extension_module")
        log = tmp_path / "a.log.xz"
        log.write_bytes(b"irrelevant")
        ex = _extractor(aggregate, workspace)
        with pytest.raises(FileSkipError, match="xz support is not available"):
            ex.extract(DiscoveredFile.from_path(log))


class TestJournal:
    def test_every_attempt_journalled(
        self, tmp_path: Path, workspace: Path, aggregate: IO[str]
    ) -> None:
        good = tmp_path / "good.log"
        good.write_text(_DAYS)
        bad = tmp_path / "bad.log.gz"
        bad.write_text("nope")
        ex = _extractor(aggregate, workspace)
        ex.extract(DiscoveredFile.from_path(good))
        with pytest.raises(FileSkipError):
            ex.extract(DiscoveredFile.from_path(bad))

        journal = (workspace / "processing.log").read_text().splitlines()
        assert journal == [f"Processing: {good}", f"Processing: {bad}"]

    def test_journal_holds_paths_not_content(
        self, tmp_path: Path, workspace: Path, aggregate: IO[str]
    ) -> None:
        log = tmp_path / "app.log"
        log.write_text(_DAYS)
        _extractor(aggregate, workspace).extract(DiscoveredFile.from_path(log))
        assert "day 2" not in (workspace / "processing.log").read_text()

    def test_skipped_entry(self, workspace: Path) -> None:
        Journal(workspace).skipped(Path("/var/log/empty.log"), "unreadable or empty")
        assert (workspace / "skipped.log").read_text() == (
            "Skipping (unreadable or empty): /var/log/empty.log\n"
        )
