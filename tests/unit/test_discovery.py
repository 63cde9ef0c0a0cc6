"""Unit tests for logaudit.core.discovery: directory walk and pattern matching."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from logaudit.core.discovery import DiscoveredFile, discover


def _touch(path: Path, content: str = "2023-01-02 x\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def log_root(tmp_path: Path) -> Path:
    root = tmp_path / "log"
    _touch(root / "app.log")
    _touch(root / "syslog")
    _touch(root / "syslog.1")
    _touch(root / "nested" / "deep" / "service.log")
    _touch(root / "notes.txt")
    return root


class TestDiscover:
    def test_recursive_match(self, log_root: Path) -> None:
        found = [f.path for f in discover([log_root], ["*.log"])]
        assert sorted(found) == sorted(
            [log_root / "app.log", log_root / "nested" / "deep" / "service.log"]
        )

    def test_non_matching_files_ignored(self, log_root: Path) -> None:
        names = {f.path.name for f in discover([log_root], ["*.log", "syslog*"])}
        assert "notes.txt" not in names

    def test_missing_directory_skipped_silently(self, tmp_path: Path, log_root: Path) -> None:
        found = list(discover([tmp_path / "nope", log_root], ["app.log"]))
        assert [f.path for f in found] == [log_root / "app.log"]

    def test_directory_then_pattern_order(self, tmp_path: Path) -> None:
        a = tmp_path / "a"
        b = tmp_path / "b"
        _touch(a / "x.log")
        _touch(a / "syslog")
        _touch(b / "y.log")
        found = [f.path for f in discover([b, a], ["syslog*", "*.log"])]
        assert found == [b / "y.log", a / "syslog", a / "x.log"]

    def test_overlapping_patterns_yield_duplicates(self, tmp_path: Path) -> None:
        _touch(tmp_path / "syslog.log")
        found = [f.path for f in discover([tmp_path], ["*.log", "syslog*"])]
        assert found == [tmp_path / "syslog.log", tmp_path / "syslog.log"]

    def test_dedupe_drops_repeat_matches(self, tmp_path: Path) -> None:
        _touch(tmp_path / "syslog.log")
        found = [f.path for f in discover([tmp_path], ["*.log", "syslog*"], dedupe=True)]
        assert found == [tmp_path / "syslog.log"]

    def test_dedupe_across_overlapping_roots(self, tmp_path: Path) -> None:
        _touch(tmp_path / "audit" / "audit.log")
        found = list(discover([tmp_path, tmp_path / "audit"], ["*.log"], dedupe=True))
        assert len(found) == 1

    def test_symlinks_not_followed(self, tmp_path: Path) -> None:
        real = _touch(tmp_path / "real.log")
        (tmp_path / "link.log").symlink_to(real)
        found = [f.path.name for f in discover([tmp_path], ["*.log"])]
        assert found == ["real.log"]

    def test_is_lazy(self, log_root: Path) -> None:
        gen = discover([log_root], ["*.log"])
        assert next(gen).path.suffix == ".log"


class TestDiscoveredFile:
    def test_empty_file_skippable(self, tmp_path: Path) -> None:
        f = DiscoveredFile.from_path(_touch(tmp_path / "empty.log", ""))
        assert f.size == 0
        assert f.skippable

    def test_regular_file_not_skippable(self, tmp_path: Path) -> None:
        f = DiscoveredFile.from_path(_touch(tmp_path / "a.log"))
        assert f.size > 0
        assert f.readable
        assert not f.skippable

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read mode-000 files")
    def test_unreadable_file_skippable(self, tmp_path: Path) -> None:
        path = _touch(tmp_path / "secret.log")
        path.chmod(0o000)
        try:
            f = DiscoveredFile.from_path(path)
            assert not f.readable
            assert f.skippable
        finally:
            path.chmod(0o644)
