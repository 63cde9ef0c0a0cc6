"""Run summary report: model and fixed text rendering."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

HEADER = "=== Log Audit Summary ==="


def human_size(num_bytes: int) -> str:
    """Format a byte count the way ``du -h`` does (1024 base, one decimal)."""
    if num_bytes < 1024:
        return f"{num_bytes}B"
    size = float(num_bytes)
    for unit in ("K", "M", "G"):
        size /= 1024
        if size < 1024:
            return f"{size:.1f}{unit}"
    return f"{size / 1024:.1f}T"


@dataclass(frozen=True)
class RunSummary:
    timestamp: datetime
    period: str
    level_filter: str | None
    total_files_found: int
    files_processed: int
    files_failed: int
    output_path: Path
    output_size_bytes: int
    lines_extracted: int

    def render(self) -> str:
        lines = [
            HEADER,
            f"Timestamp: {self.timestamp.strftime('%a %b %d %H:%M:%S %Z %Y')}",
            f"Audit Period: {self.period}",
            f"Log Level Filter: {self.level_filter or 'None'}",
            f"Total Files Found: {self.total_files_found}",
            f"Files Processed: {self.files_processed}",
            f"Files Failed: {self.files_failed}",
            f"Output File: {self.output_path}",
            f"File Size: {human_size(self.output_size_bytes)} ({self.output_size_bytes} bytes)",
            f"Lines Extracted: {self.lines_extracted}",
        ]
        return "\n".join(lines) + "\n"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["output_path"] = str(self.output_path)
        return data

    def write(self, path: Path) -> Path:
        """Write the rendered report via a temp name + rename."""
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_text(self.render(), encoding="utf-8")
            tmp_path.replace(path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        return path
