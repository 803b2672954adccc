"""Tests for the audit logger."""

import re

from src.core.audit import AUDIT_LOG_FILENAME, AuditLogger

LINE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] \[(SUCCESS|FAILED|CANCELLED)\] \[[A-Z-]+\] ")


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_line_format(self, audit):
        assert audit.log_apply("visual.showFileExtensions", "Show File Extensions", True)

        text = audit.log_path.read_text(encoding="utf-8")
        assert audit.log_path.name == AUDIT_LOG_FILENAME
        assert LINE.match(text)
        assert text.endswith(
            "[SUCCESS] [APPLY] Applied tweak: Show File Extensions (visual.showFileExtensions)\n"
        )

    def test_entries_are_appended(self, audit):
        audit.log_session_start()
        audit.log_undo("a", "A", True)
        audit.log_session_end()

        entries = audit.read_entries()
        assert [e.operation for e in entries] == ["SESSION", "UNDO", "SESSION"]
        assert entries[0].details == "=== Tweakd Session Started ==="

    def test_failure_includes_error(self, audit):
        audit.log_apply("a", "A", False, "Access denied")

        entry = audit.read_entries()[0]
        assert entry.status == "FAILED"
        assert not entry.success
        assert entry.details == "Failed to apply tweak: A (a): Access denied"

    def test_multiline_details_stay_on_one_line(self, audit):
        audit.log_operation("APPLY", "first\nsecond", True)

        assert len(audit.log_path.read_text(encoding="utf-8").splitlines()) == 1
        assert audit.read_entries()[0].details == "first second"

    def test_wrapper_operations(self, audit):
        audit.log_undo_skip("bloatware.removeApps", "Remove Apps")
        audit.log_dry_run("a", "A", "Set HKCU\\X\\Y = 1")
        audit.log_restore_point("Before tweaks", False, "ExitCode=1")
        audit.log_batch("undo", "Undo completed: 1 succeeded, 0 failed", True)
        audit.log_cancelled("apply", "Apply cancelled after 0 succeeded, 0 failed")

        entries = audit.read_entries()
        assert [(e.status, e.operation) for e in entries] == [
            ("SUCCESS", "UNDO-SKIP"),
            ("SUCCESS", "DRY-RUN"),
            ("FAILED", "RESTORE-POINT"),
            ("SUCCESS", "UNDO-BATCH"),
            ("CANCELLED", "APPLY"),
        ]
        assert entries[2].details == "Before tweaks: ExitCode=1"

    def test_skip_and_failed_dry_run(self, audit):
        audit.log_apply_skip(
            "widgets.disable", "Disable Widgets", "Requires Windows build 22000 or later"
        )
        audit.log_dry_run("a", "A", "", success=False, error="registry unreadable")

        skip, dry_run = audit.read_entries()
        assert (skip.status, skip.operation) == ("SUCCESS", "APPLY-SKIP")
        assert skip.details == (
            "Disable Widgets (widgets.disable) skipped: Requires Windows build 22000 or later"
        )
        assert (dry_run.status, dry_run.operation) == ("FAILED", "DRY-RUN")
        assert dry_run.details == "Dry-run failed for A (a): registry unreadable"

    def test_unencodable_text_is_escaped(self, audit):
        assert audit.log_operation("APPLY", "bad \udcff name", False) is True

        entry = audit.read_entries()[0]
        assert entry.details == "bad \\udcff name"

    def test_admin_check(self, audit):
        audit.log_admin_check("Apply", admin_required=True, has_admin=False)
        audit.log_admin_check("Apply", admin_required=False, has_admin=False)

        first, second = audit.read_entries()
        assert first.status == "FAILED"
        assert first.details == "Apply - Admin required: True, Has admin: False"
        assert second.success

    def test_write_failure_returns_false(self, temp_dir):
        blocked = temp_dir / "blocked"
        blocked.write_text("file, not a directory", encoding="utf-8")
        audit = AuditLogger(blocked)

        assert audit.log_session_start() is False
        assert audit.read_entries() == []

    def test_unparseable_lines_are_skipped(self, audit):
        audit.log_session_start()
        with open(audit.log_path, "a", encoding="utf-8") as f:
            f.write("not an audit line\n")
        audit.log_session_end()

        assert len(audit.read_entries()) == 2

    def test_export_and_clear(self, audit):
        assert audit.export_logs() == "No log file found."

        audit.log_session_start()
        assert "Session Started" in audit.export_logs()

        audit.clear_logs()
        assert not audit.log_path.exists()
        audit.clear_logs()

    def test_instances_share_the_file(self, temp_dir):
        first = AuditLogger(temp_dir)
        second = AuditLogger(temp_dir)
        first.log_session_start()
        second.log_session_end()

        assert len(first.read_entries()) == 2
