"""Tests for the service snapshot store."""

import json

from src.core.snapshot import SnapshotManager, create_snapshot_manager
from src.system.services import ServiceStartType


class TestSnapshotManager:
    """Tests for SnapshotManager."""

    def test_empty_history(self, snapshots):
        assert snapshots.list_snapshots() == []
        assert snapshots.get_snapshot_start_type("DiagTrack") is None

    def test_create_snapshot_persists(self, snapshots):
        record = snapshots.create_snapshot(["DiagTrack", "SysMain"])

        assert record.services == {"DiagTrack": "Automatic", "SysMain": "Manual"}
        assert record.timestamp

        data = json.loads(snapshots.snapshot_file.read_text(encoding="utf-8"))
        assert data[0]["services"]["SysMain"] == "Manual"

    def test_missing_services_are_left_out(self, snapshots):
        record = snapshots.create_snapshot(["DiagTrack", "NotInstalled"])

        assert list(record.services) == ["DiagTrack"]

    def test_last_write_wins(self, snapshots, services):
        snapshots.create_snapshot(["DiagTrack"])
        services.start_types["DiagTrack"] = ServiceStartType.MANUAL
        snapshots.create_snapshot(["DiagTrack"])

        assert snapshots.get_snapshot_start_type("DiagTrack") == "Manual"
        assert len(snapshots.list_snapshots()) == 2

    def test_older_records_still_answer(self, snapshots, services):
        snapshots.create_snapshot(["SysMain"])
        snapshots.create_snapshot(["DiagTrack"])

        assert snapshots.get_snapshot_start_type("SysMain") == "Manual"

    def test_lookup_is_case_insensitive(self, snapshots):
        snapshots.create_snapshot(["DiagTrack"])

        assert snapshots.get_snapshot_start_type("diagtrack") == "Automatic"

    def test_corrupt_file_is_empty_history(self, snapshots):
        snapshots.snapshot_file.write_text("{not json", encoding="utf-8")

        assert snapshots.list_snapshots() == []
        assert snapshots.get_snapshot_start_type("DiagTrack") is None

    def test_non_list_file_is_empty_history(self, snapshots):
        snapshots.snapshot_file.write_text(json.dumps({"services": {}}), encoding="utf-8")

        assert snapshots.list_snapshots() == []

    def test_corrupt_file_is_replaced_on_write(self, snapshots):
        snapshots.snapshot_file.write_text("garbage", encoding="utf-8")
        snapshots.create_snapshot(["DiagTrack"])

        assert len(snapshots.list_snapshots()) == 1

    def test_clear(self, snapshots):
        snapshots.create_snapshot(["DiagTrack"])
        snapshots.clear_snapshots()

        assert not snapshots.snapshot_file.exists()
        # Clearing twice is harmless
        snapshots.clear_snapshots()

    def test_factory_uses_config_dir(self, services, test_config):
        manager = create_snapshot_manager(services, test_config)

        assert isinstance(manager, SnapshotManager)
        assert manager.snapshot_file == test_config.config_dir / "service_snapshots.json"
