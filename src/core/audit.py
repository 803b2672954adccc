"""Audit Logger - Append-only record of every tweak operation.

Each line has the form::

    [2024-05-01 12:00:00] [SUCCESS] [APPLY] Applied tweak: Show File Extensions (visual.showFileExtensions)

Logging is best-effort: failures to write are swallowed and reported
through the return value, never raised into the operation being logged.
"""

import logging
import re
import threading
from datetime import datetime
from pathlib import Path

from src.core.models import AuditEntry

logger = logging.getLogger("tweakd.core.audit")

AUDIT_LOG_FILENAME = "tweakd_audit.log"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

STATUS_SUCCESS = "SUCCESS"
STATUS_FAILED = "FAILED"
STATUS_CANCELLED = "CANCELLED"

_LINE_PATTERN = re.compile(
    r"^\[(?P<timestamp>[^\]]+)\] \[(?P<status>[A-Z]+)\] \[(?P<operation>[^\]]+)\] ?(?P<details>.*)$"
)

# One lock per log file so separate logger instances on the same file
# still serialize their writes.
_file_locks: dict[Path, threading.Lock] = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _file_locks_guard:
        if key not in _file_locks:
            _file_locks[key] = threading.Lock()
        return _file_locks[key]


class AuditLogger:
    """Writes timestamped audit lines to ``<logs_dir>/tweakd_audit.log``.

    Example:
        audit = AuditLogger(config.logs_dir)
        audit.log_session_start()
        audit.log_apply("visual.showFileExtensions", "Show File Extensions", True)
    """

    def __init__(self, logs_dir: Path) -> None:
        """Initialize the audit logger.

        Args:
            logs_dir: Directory that holds the audit log file
        """
        self.log_path = Path(logs_dir) / AUDIT_LOG_FILENAME
        self._lock = _lock_for(self.log_path)

    def log_operation(
        self,
        operation_type: str,
        details: str,
        success: bool = True,
        cancelled: bool = False,
    ) -> bool:
        """Append one audit line.

        Args:
            operation_type: Operation tag (APPLY, UNDO, RESTORE-POINT, ...)
            details: Free-text description
            success: Whether the operation succeeded
            cancelled: Mark the entry as a user cancellation instead

        Returns:
            True if the line was written, False if writing failed
        """
        if cancelled:
            status = STATUS_CANCELLED
        else:
            status = STATUS_SUCCESS if success else STATUS_FAILED

        timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        # Keep one entry per line
        details = " ".join(details.splitlines())
        line = f"[{timestamp}] [{status}] [{operation_type}] {details}\n"

        with self._lock:
            try:
                self.log_path.parent.mkdir(parents=True, exist_ok=True)
                # Unencodable text (lone surrogates from Windows APIs) is escaped
                with open(
                    self.log_path, "a", encoding="utf-8", errors="backslashreplace"
                ) as f:
                    f.write(line)
            except OSError as e:
                logger.warning(f"Could not write audit log {self.log_path}: {e}")
                return False

        return True

    def log_apply(self, tweak_id: str, title: str, success: bool, error: str | None = None) -> bool:
        if success:
            message = f"Applied tweak: {title} ({tweak_id})"
        else:
            message = f"Failed to apply tweak: {title} ({tweak_id})"
            if error:
                message += f": {error}"
        return self.log_operation("APPLY", message, success)

    def log_undo(self, tweak_id: str, title: str, success: bool, error: str | None = None) -> bool:
        if success:
            message = f"Undid tweak: {title} ({tweak_id})"
        else:
            message = f"Failed to undo tweak: {title} ({tweak_id})"
            if error:
                message += f": {error}"
        return self.log_operation("UNDO", message, success)

    def log_undo_skip(self, tweak_id: str, title: str) -> bool:
        return self.log_operation("UNDO-SKIP", f"{title} ({tweak_id}) does not support undo", True)

    def log_apply_skip(self, tweak_id: str, title: str, reason: str) -> bool:
        return self.log_operation("APPLY-SKIP", f"{title} ({tweak_id}) skipped: {reason}", True)

    def log_dry_run(
        self, tweak_id: str, title: str, changes: str, success: bool = True, error: str | None = None
    ) -> bool:
        if success:
            message = f"Dry-run for {title} ({tweak_id}): {changes}"
        else:
            message = f"Dry-run failed for {title} ({tweak_id})"
            if error:
                message += f": {error}"
        return self.log_operation("DRY-RUN", message, success)

    def log_restore_point(self, description: str, success: bool, error: str | None = None) -> bool:
        details = description if success or not error else f"{description}: {error}"
        return self.log_operation("RESTORE-POINT", details, success)

    def log_admin_check(self, operation: str, admin_required: bool, has_admin: bool) -> bool:
        """Record a privilege pre-flight check.

        The entry is a failure when admin rights are required but missing.
        """
        message = f"{operation} - Admin required: {admin_required}, Has admin: {has_admin}"
        return self.log_operation("ADMIN-CHECK", message, has_admin or not admin_required)

    def log_batch(self, operation: str, summary: str, success: bool) -> bool:
        return self.log_operation(f"{operation.upper()}-BATCH", summary, success)

    def log_cancelled(self, operation: str, details: str) -> bool:
        return self.log_operation(operation.upper(), details, success=False, cancelled=True)

    def log_session_start(self) -> bool:
        return self.log_operation("SESSION", "=== Tweakd Session Started ===", True)

    def log_session_end(self) -> bool:
        return self.log_operation("SESSION", "=== Tweakd Session Ended ===", True)

    def read_entries(self) -> list[AuditEntry]:
        """Parse the audit log into entries.

        Lines that do not match the audit format are skipped.

        Returns:
            Entries in file order, or an empty list if the log is unreadable
        """
        try:
            with self._lock:
                text = self.log_path.read_text(encoding="utf-8")
        except OSError:
            return []

        entries: list[AuditEntry] = []
        for line in text.splitlines():
            match = _LINE_PATTERN.match(line)
            if not match:
                continue
            try:
                timestamp = datetime.strptime(match.group("timestamp"), TIMESTAMP_FORMAT)
            except ValueError:
                continue
            entries.append(
                AuditEntry(
                    timestamp=timestamp,
                    status=match.group("status"),
                    operation=match.group("operation"),
                    details=match.group("details"),
                )
            )
        return entries

    def export_logs(self) -> str:
        """Return the raw audit log text."""
        if not self.log_path.exists():
            return "No log file found."

        try:
            with self._lock:
                return self.log_path.read_text(encoding="utf-8")
        except OSError as e:
            return f"Error reading logs: {e}"

    def clear_logs(self) -> None:
        """Delete the audit log. Errors are ignored."""
        with self._lock:
            try:
                self.log_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not clear audit log {self.log_path}: {e}")
