"""Tests for System Restore integration."""

import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from fakes import FakeRunner
from src.core.errors import CommandError, OperationCancelledError, RestorePointError
from src.core.restore import SystemRestoreManager
from src.system.shell import CommandResult


class TestCreateRestorePoint:
    """Tests for restore point creation."""

    def test_success(self, runner):
        SystemRestoreManager(runner).create_restore_point("Before tweaks")

        assert runner.scripts == [
            "Checkpoint-Computer -Description 'Before tweaks' "
            "-RestorePointType 'MODIFY_SETTINGS' -ErrorAction Stop"
        ]

    def test_description_is_escaped(self, runner):
        SystemRestoreManager(runner).create_restore_point("Bob's tweaks")

        assert "'Bob''s tweaks'" in runner.scripts[0]

    def test_cancel_event_is_forwarded(self, runner):
        event = MagicMock()
        SystemRestoreManager(runner).create_restore_point("x", cancel_event=event)

        assert runner.cancel_events == [event]

    def test_nonzero_exit_raises(self):
        runner = FakeRunner(CommandResult(exit_code=1, error="System Protection is off"))

        with pytest.raises(RestorePointError) as exc_info:
            SystemRestoreManager(runner).create_restore_point("x")

        assert exc_info.value.exit_code == 1
        assert "ExitCode=1" in str(exc_info.value)
        assert "System Protection is off" in str(exc_info.value)

    def test_start_failure_raises(self):
        runner = MagicMock()
        runner.run_powershell.side_effect = CommandError("powershell.exe not found")

        with pytest.raises(RestorePointError, match="not found"):
            SystemRestoreManager(runner).create_restore_point("x")

    def test_cancellation_propagates(self):
        runner = MagicMock()
        runner.run_powershell.side_effect = OperationCancelledError("cancelled")

        with pytest.raises(OperationCancelledError):
            SystemRestoreManager(runner).create_restore_point("x")


class TestListRestorePoints:
    """Tests for listing restore points."""

    def test_parses_list(self):
        output = json.dumps(
            [
                {
                    "SequenceNumber": 42,
                    "Description": "Before tweaks",
                    "CreationTime": "20240501120000.000000-000",
                    "RestorePointType": 12,
                },
                {
                    "SequenceNumber": 41,
                    "Description": "Windows Update",
                    "CreationTime": "garbage",
                    "RestorePointType": 99,
                },
            ]
        )
        runner = FakeRunner(CommandResult(exit_code=0, output=output))

        points = SystemRestoreManager(runner).list_restore_points(limit=5)

        assert "Select-Object -First 5" in runner.scripts[0]
        assert [p.sequence_number for p in points] == [42, 41]
        assert points[0].creation_time == datetime(2024, 5, 1, 12, 0, 0)
        assert points[0].restore_point_type == "Modify Settings"
        assert points[1].creation_time is None
        assert points[1].restore_point_type == "Unknown (99)"

    def test_single_object(self):
        output = json.dumps({"SequenceNumber": 7, "Description": "One", "RestorePointType": 0})
        runner = FakeRunner(CommandResult(exit_code=0, output=output))

        points = SystemRestoreManager(runner).list_restore_points()

        assert len(points) == 1
        assert points[0].restore_point_type == "Application Install"

    @pytest.mark.parametrize(
        "result",
        [
            CommandResult(exit_code=1, error="denied"),
            CommandResult(exit_code=0, output=""),
            CommandResult(exit_code=0, output="not json"),
        ],
    )
    def test_errors_give_empty_list(self, result):
        assert SystemRestoreManager(FakeRunner(result)).list_restore_points() == []

    def test_start_failure_gives_empty_list(self):
        runner = MagicMock()
        runner.run_powershell.side_effect = CommandError("missing")

        assert SystemRestoreManager(runner).list_restore_points() == []
