"""Read-only integration tests for services, OS probes and PowerShell."""

import sys

import pytest

pytestmark = [
    pytest.mark.skipif(sys.platform != "win32", reason="Requires Windows"),
    pytest.mark.windows,
]


class TestServicesLive:
    """Query real services through WMI and the registry."""

    def test_known_service_exists(self):
        from src.system.services import WindowsServiceManager

        services = WindowsServiceManager()
        # Present on every Windows installation
        assert services.exists("Winmgmt")
        assert not services.exists("TweakdNoSuchService")

    def test_start_type_is_known(self):
        from src.system.services import ServiceStartType, WindowsServiceManager

        start_type = WindowsServiceManager().get_start_type("Winmgmt")

        assert start_type != ServiceStartType.UNKNOWN

    def test_missing_service_raises(self):
        from src.system.services import WindowsServiceManager

        with pytest.raises(LookupError):
            WindowsServiceManager().get_start_type("TweakdNoSuchService")

    def test_snapshot_of_real_service(self, real_config):
        from src.core.snapshot import create_snapshot_manager
        from src.system.services import WindowsServiceManager

        snapshots = create_snapshot_manager(WindowsServiceManager(), real_config)
        record = snapshots.create_snapshot(["Winmgmt"])

        assert "Winmgmt" in record.services
        assert snapshots.get_snapshot_start_type("winmgmt") == record.services["Winmgmt"]


class TestOSGuardLive:
    """Probe the running OS."""

    def test_build_and_version(self):
        from src.core.osguard import OSGuard, WindowsVersion

        guard = OSGuard()

        assert guard.get_build_number() > 10000
        assert guard.get_windows_version() != WindowsVersion.UNKNOWN

    def test_system_info(self):
        from src.core.osguard import OSGuard

        info = OSGuard().get_system_info()

        assert info.startswith("Windows")
        assert "Protection:" in info


class TestShellLive:
    """Run real PowerShell commands."""

    def test_exit_code_and_output(self):
        from src.system.shell import CommandRunner

        result = CommandRunner(timeout=60).run_powershell("Write-Output 'tweakd'")

        assert result.success
        assert result.output == "tweakd"

    def test_failure_exit_code(self):
        from src.system.shell import CommandRunner

        result = CommandRunner(timeout=60).run_powershell("exit 3")

        assert result.exit_code == 3
