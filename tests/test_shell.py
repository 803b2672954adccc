"""Tests for external process invocation."""

import subprocess
import threading
from unittest.mock import MagicMock, patch

import pytest

from src.core.errors import CommandError, OperationCancelledError
from src.system.shell import CommandRunner, escape_ps


def make_process(returncode=0, communicate=None):
    process = MagicMock()
    process.returncode = returncode
    process.communicate.side_effect = communicate or [("", "")]
    return process


def test_escape_ps():
    assert escape_ps("O'Brien's") == "O''Brien''s"
    assert escape_ps("plain") == "plain"


class TestCommandRunner:
    """Tests for CommandRunner."""

    def test_powershell_arguments(self):
        process = make_process(communicate=[("ok\n", "")])

        with patch("src.system.shell.subprocess.Popen", return_value=process) as popen:
            result = CommandRunner().run_powershell("Get-Service")

        args = popen.call_args.args[0]
        assert args[0] == "powershell.exe"
        assert args[-2:] == ["-Command", "Get-Service"]
        assert "-NoProfile" in args
        assert result.success
        assert result.output == "ok"

    def test_nonzero_exit(self):
        process = make_process(returncode=1, communicate=[("", "bad thing\n")])

        with patch("src.system.shell.subprocess.Popen", return_value=process):
            result = CommandRunner().run(["tool.exe"])

        assert not result.success
        assert result.exit_code == 1
        assert result.error == "bad thing"

    def test_stderr_ignored_on_success(self):
        process = make_process(communicate=[("", "progress noise")])

        with patch("src.system.shell.subprocess.Popen", return_value=process):
            result = CommandRunner().run(["tool.exe"])

        assert result.error == ""

    def test_start_failure(self):
        with patch("src.system.shell.subprocess.Popen", side_effect=FileNotFoundError("nope")):
            with pytest.raises(CommandError, match="tool.exe"):
                CommandRunner().run(["tool.exe"])

    def test_timeout_kills_process(self):
        expired = subprocess.TimeoutExpired("tool.exe", 0.25)
        process = make_process(communicate=[expired, expired, ("", "")])

        with patch("src.system.shell.subprocess.Popen", return_value=process):
            result = CommandRunner(timeout=0.5).run(["tool.exe"])

        process.kill.assert_called_once()
        assert result.exit_code == -1
        assert "timed out" in result.error

    def test_cancel_kills_process(self):
        event = threading.Event()
        event.set()
        process = make_process()

        with patch("src.system.shell.subprocess.Popen", return_value=process):
            with pytest.raises(OperationCancelledError):
                CommandRunner().run(["tool.exe"], cancel_event=event)

        process.kill.assert_called_once()

    def test_cancel_while_running(self):
        event = threading.Event()
        expired = subprocess.TimeoutExpired("tool.exe", 0.25)

        def communicate(timeout=None):
            if timeout is None:
                return ("", "")
            event.set()
            raise expired

        process = MagicMock()
        process.communicate.side_effect = communicate

        with patch("src.system.shell.subprocess.Popen", return_value=process):
            with pytest.raises(OperationCancelledError):
                CommandRunner().run(["tool.exe"], cancel_event=event)

        process.kill.assert_called_once()
