"""Tests for core data models."""

from datetime import datetime

from src.core.models import (
    AuditEntry,
    BatchResult,
    BatchStatus,
    OutcomeStatus,
    Profile,
    RegistryEntry,
    SnapshotRecord,
    TweakOutcome,
    TweakSeverity,
    TweakStatus,
    ValueKind,
)


class TestEnums:
    """Tests for enum types."""

    def test_severity_ordering(self):
        assert TweakSeverity.SAFE < TweakSeverity.CAUTION
        assert TweakSeverity.CAUTION < TweakSeverity.DANGEROUS
        assert TweakSeverity.DANGEROUS >= TweakSeverity.CAUTION
        assert TweakSeverity.DANGEROUS > TweakSeverity.SAFE

    def test_severity_label(self):
        assert TweakSeverity.SAFE.label == "Safe"
        assert TweakSeverity.DANGEROUS.label == "Dangerous"

    def test_status_values(self):
        assert TweakStatus.APPLIED.value == "Applied"
        assert TweakStatus.NOT_APPLIED.value == "NotApplied"
        assert TweakStatus.NOT_SUPPORTED.value == "NotSupported"

    def test_value_kind_names(self):
        assert ValueKind.DWORD.value == "REG_DWORD"
        assert ValueKind.STRING.value == "REG_SZ"


class TestRegistryEntry:
    """Tests for RegistryEntry."""

    def test_default_kind_is_dword(self):
        entry = RegistryEntry("HKCU", "Software\\Test", "Value", 0, 1)
        assert entry.kind == ValueKind.DWORD

    def test_location(self):
        entry = RegistryEntry("HKCU", "Software\\Test", "Value", 0, 1)
        assert entry.location == "HKCU\\Software\\Test\\Value"


class TestProfile:
    def test_profile_is_immutable_value(self):
        a = Profile("p", "P", "desc", ("a", "b"))
        b = Profile("p", "P", "desc", ("a", "b"))
        assert a == b
        assert hash(a) == hash(b)


class TestSnapshotRecord:
    """Tests for SnapshotRecord serialization."""

    def test_round_trip(self):
        record = SnapshotRecord.now({"DiagTrack": "Automatic"})
        restored = SnapshotRecord.from_dict(record.to_dict())

        assert restored == record

    def test_from_dict_tolerates_bad_services(self):
        record = SnapshotRecord.from_dict({"timestamp": "t", "services": ["DiagTrack"]})

        assert record.timestamp == "t"
        assert record.services == {}

    def test_timestamp_is_iso_utc(self):
        record = SnapshotRecord.now({})
        parsed = datetime.fromisoformat(record.timestamp)
        assert parsed.utcoffset().total_seconds() == 0


class TestAuditEntry:
    def test_success(self):
        now = datetime.now()
        assert AuditEntry(now, "SUCCESS", "APPLY", "x").success
        assert not AuditEntry(now, "FAILED", "APPLY", "x").success
        assert not AuditEntry(now, "CANCELLED", "APPLY", "x").success


class TestBatchResult:
    """Tests for BatchResult aggregation."""

    def _result(self, *statuses, status=BatchStatus.COMPLETED):
        outcomes = [TweakOutcome(f"t{i}", f"Tweak {i}", s) for i, s in enumerate(statuses)]
        return BatchResult(operation="apply", outcomes=outcomes, status=status)

    def test_partitions(self):
        result = self._result(
            OutcomeStatus.SUCCEEDED,
            OutcomeStatus.FAILED,
            OutcomeStatus.SUCCEEDED,
            OutcomeStatus.SKIPPED,
        )

        assert len(result.succeeded) == 2
        assert len(result.failed) == 1
        assert len(result.skipped) == 1

    def test_summary(self):
        result = self._result(OutcomeStatus.SUCCEEDED, OutcomeStatus.FAILED)
        assert result.summary() == "Apply completed: 1 succeeded, 1 failed"

    def test_summary_with_skips(self):
        result = self._result(OutcomeStatus.SUCCEEDED, OutcomeStatus.SKIPPED)
        assert result.summary() == "Apply completed: 1 succeeded, 0 failed, 1 skipped"

    def test_cancelled_summary(self):
        result = self._result(
            OutcomeStatus.SUCCEEDED, OutcomeStatus.CANCELLED, status=BatchStatus.CANCELLED
        )

        assert result.cancelled
        assert not result.ok
        assert result.summary() == "Apply cancelled after 1 succeeded, 0 failed"

    def test_ok_only_when_completed(self):
        assert self._result(OutcomeStatus.SUCCEEDED).ok
        assert not self._result(status=BatchStatus.COMPLETED_WITH_ERRORS).ok
