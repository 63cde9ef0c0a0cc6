"""log-audit constants: exit codes, filesystem layout, and defaults."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    PERMISSION_ERROR = 5
    ALREADY_RUNNING = 6
    DEPENDENCY_MISSING = 7


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

DEFAULT_CONFIG_PATH = "/etc/log_audit.toml"
DEFAULT_LOCK_PATH = "/tmp/log_audit.lock"  # nosec B108

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
ARTIFACT_TEMPLATE = "audit_{timestamp}.log.gz"
SUMMARY_TEMPLATE = "audit_summary_{timestamp}.txt"
ARTIFACT_GLOB = "audit_*.log.gz"
WORKSPACE_PREFIX = "log_audit_"

AGGREGATE_FILENAME = "extracted.log"
PROCESSING_JOURNAL = "processing.log"
SKIPPED_JOURNAL = "skipped.log"

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_LOG_DIRS = ("/var/log", "/var/log/audit")
DEFAULT_LOG_PATTERNS = ("*.log", "*.log.*", "syslog*", "messages*", "secure*")
DEFAULT_START_DATE = "2022-01-01"
DEFAULT_END_DATE = "2022-01-31"
DEFAULT_OUTPUT_DIR = "/secure/audit_logs"
DEFAULT_RETENTION_DAYS = 30

SECONDS_PER_DAY = 86400
