"""
log-audit: date-range extraction and archiving of system logs.

log-audit walks a set of log directories, pulls every line whose leading
date token falls inside a requested period (optionally narrowed to a
severity pattern), and stores the result as a single gzip artifact with a
plain-text summary next to it. Older artifacts are swept by age.

Package layout (src/logaudit/):
  core/       — dates, discovery, filters, codecs, extractor, lock, runner
  cli/        — Click CLI entry point
"""

__version__ = "2.1.0"
__all__ = ["__version__"]
